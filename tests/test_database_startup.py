"""Tests for schema checks and service construction against a database."""

import os
import tempfile
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import create_engine, inspect

from nonceguard.database import check_database_tables, create_db_engine
from nonceguard.services.nonce_service import new_in_memory_service, new_service
from nonceguard.stores.memory_store import MemoryNonceStore
from nonceguard.stores.sql_store import SQLNonceStore
from tests.conftest import IDLE_SWEEP_INTERVAL_SECONDS


class TestCheckDatabaseTables:
    def test_raises_on_missing_tables(self):
        with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp:
            empty_db_path = tmp.name

        try:
            empty_engine = create_engine(
                f"sqlite:///{empty_db_path}",
                connect_args={"check_same_thread": False},
            )
            assert len(inspect(empty_engine).get_table_names()) == 0

            with pytest.raises(RuntimeError) as exc_info:
                check_database_tables(empty_engine)

            error_message = str(exc_info.value)
            assert "Database tables missing" in error_message
            assert "nonce" in error_message
            assert "alembic upgrade head" in error_message
            empty_engine.dispose()
        finally:
            if os.path.exists(empty_db_path):
                os.unlink(empty_db_path)

    def test_passes_with_all_tables(self, engine):
        check_database_tables(engine)


class TestServiceFactories:
    def test_new_service_uses_database(self, engine):
        service = new_service(engine, sweep_interval_seconds=IDLE_SWEEP_INTERVAL_SECONDS)
        try:
            assert isinstance(service.store, SQLNonceStore)
            user_id = uuid.uuid4()
            nonce = service.new("confirm-email", user_id, timedelta(minutes=1))
            service.check(nonce.token, "confirm-email", user_id)
        finally:
            service.shutdown()

    def test_new_service_fails_fast_without_schema(self):
        engine = create_db_engine("sqlite:///:memory:")
        try:
            with pytest.raises(RuntimeError):
                new_service(engine, sweep_interval_seconds=IDLE_SWEEP_INTERVAL_SECONDS)
        finally:
            engine.dispose()

    def test_new_in_memory_service(self):
        with new_in_memory_service(sweep_interval_seconds=IDLE_SWEEP_INTERVAL_SECONDS) as service:
            assert isinstance(service.store, MemoryNonceStore)
            assert service.sweeper.interval_seconds == IDLE_SWEEP_INTERVAL_SECONDS

    def test_default_interval_comes_from_settings(self):
        with new_in_memory_service() as service:
            assert service.sweeper.interval_seconds == 24 * 60 * 60

    def test_instances_are_independently_configured(self):
        with new_in_memory_service(sweep_interval_seconds=1) as fast:
            with new_in_memory_service(sweep_interval_seconds=120) as slow:
                assert fast.sweeper.interval_seconds == 1
                assert slow.sweeper.interval_seconds == 120
                assert fast.store is not slow.store
