import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from nonceguard.database import Base


class NonceRecord(Base):
    """
    Persisted nonce row.

    Only is_used and is_valid change after insert. Rows are physically
    removed by the expiry sweeper alone.
    """

    __tablename__ = "nonce"
    __table_args__ = (Index("ix_nonce_action_user_id", "action", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Token lookup
    token: Mapped[str] = mapped_column(String(88), index=True, unique=True, nullable=False)
    action: Mapped[str | None] = mapped_column(Text, nullable=True)
    salt: Mapped[str] = mapped_column(String(24), nullable=False)

    # State
    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
