import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from nonceguard.database import Base, create_session_factory
from nonceguard.services.nonce_service import NonceService
from nonceguard.stores.memory_store import MemoryNonceStore
from nonceguard.stores.sql_store import SQLNonceStore

# Sweeps fast enough to observe within a test
TEST_SWEEP_INTERVAL_SECONDS = 0.05
# Long enough that no sweep runs during a test
IDLE_SWEEP_INTERVAL_SECONDS = 3600


@pytest.fixture
def engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed database with a connection per session, safe across threads."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'nonces.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_store(engine):
    return SQLNonceStore(create_session_factory(engine))


@pytest.fixture
def memory_store():
    return MemoryNonceStore()


@pytest.fixture(params=["sql", "memory"])
def store(request, file_engine):
    """Each backend in turn; both must behave identically."""
    if request.param == "sql":
        return SQLNonceStore(create_session_factory(file_engine))
    return MemoryNonceStore()


@pytest.fixture
def service(store):
    service = NonceService(store, sweep_interval_seconds=IDLE_SWEEP_INTERVAL_SECONDS)
    try:
        yield service
    finally:
        service.shutdown()


@pytest.fixture
def sweeping_service(store):
    service = NonceService(store, sweep_interval_seconds=TEST_SWEEP_INTERVAL_SECONDS)
    try:
        yield service
    finally:
        service.shutdown()


@pytest.fixture
def user_id():
    return uuid.uuid4()
