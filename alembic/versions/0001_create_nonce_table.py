"""Create nonce table

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Single-use tokens bound to an (action, user) pair. Rows are updated only
to flip is_used / is_valid and are deleted by the expiry sweeper.
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "nonce",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, nullable=False),
        sa.Column("token", sa.String(88), nullable=False),
        sa.Column("action", sa.Text, nullable=True),
        sa.Column("salt", sa.String(24), nullable=False),
        sa.Column("is_used", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_valid", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("expires_at", sa.DateTime, nullable=False),
    )

    # Indexes
    op.create_index("ix_nonce_token", "nonce", ["token"], unique=True)
    op.create_index("ix_nonce_action_user_id", "nonce", ["action", "user_id"])
    op.create_index("ix_nonce_expires_at", "nonce", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_nonce_expires_at", table_name="nonce")
    op.drop_index("ix_nonce_action_user_id", table_name="nonce")
    op.drop_index("ix_nonce_token", table_name="nonce")
    op.drop_table("nonce")
