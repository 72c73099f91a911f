import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from nonceguard.errors import StoreError
from nonceguard.models.nonce import NonceRecord
from nonceguard.schemas.nonce import Nonce


class SQLNonceStore:
    """
    Nonce store backed by the `nonce` table.

    Every operation runs in its own session and transaction; concurrency
    between callers is left to the database engine. The table itself is
    created by the Alembic migrations.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def save(self, nonce: Nonce) -> Nonce:
        try:
            with self._session() as db:
                if nonce.id is None:
                    record = NonceRecord(id=uuid.uuid4(), **nonce.model_dump(exclude={"id"}))
                    db.add(record)
                    db.commit()
                    return Nonce.model_validate(record)

                # Only the state flags are mutable after insert
                updated = (
                    db.query(NonceRecord)
                    .filter(NonceRecord.id == nonce.id)
                    .update(
                        {"is_used": nonce.is_used, "is_valid": nonce.is_valid},
                        synchronize_session=False,
                    )
                )
                if updated == 0:
                    # Row was swept (or never existed); nothing to update
                    db.rollback()
                    return nonce.model_copy()

                record = db.query(NonceRecord).filter(NonceRecord.id == nonce.id).one()
                db.commit()
                return Nonce.model_validate(record)
        except SQLAlchemyError as e:
            raise StoreError() from e

    def get_by_token(self, token: str) -> Nonce | None:
        try:
            with self._session() as db:
                record = db.query(NonceRecord).filter(NonceRecord.token == token).first()
                return Nonce.model_validate(record) if record is not None else None
        except SQLAlchemyError as e:
            raise StoreError() from e

    def list_by_action_and_user(self, action: str, user_id: uuid.UUID) -> Sequence[Nonce]:
        try:
            with self._session() as db:
                records = (
                    db.query(NonceRecord)
                    .filter(NonceRecord.action == action, NonceRecord.user_id == user_id)
                    .all()
                )
                return [Nonce.model_validate(record) for record in records]
        except SQLAlchemyError as e:
            raise StoreError() from e

    def mark_used(self, token: str) -> Nonce | None:
        try:
            with self._session() as db:
                updated = (
                    db.query(NonceRecord)
                    .filter(
                        NonceRecord.token == token,
                        NonceRecord.is_used == False,  # noqa: E712 - SQLAlchemy requires ==
                    )
                    .update({"is_used": True}, synchronize_session=False)
                )
                if updated == 0:
                    db.rollback()
                    return None

                record = db.query(NonceRecord).filter(NonceRecord.token == token).one()
                db.commit()
                return Nonce.model_validate(record)
        except SQLAlchemyError as e:
            raise StoreError() from e

    def delete_expired(self, now: datetime) -> int:
        try:
            with self._session() as db:
                result = (
                    db.query(NonceRecord)
                    .filter(NonceRecord.expires_at < now)
                    .delete(synchronize_session=False)
                )
                db.commit()
                return result
        except SQLAlchemyError as e:
            raise StoreError() from e
