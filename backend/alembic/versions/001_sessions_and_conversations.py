"""Create sessions and conversations tables

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_sessions_updated_at", "sessions", ["updated_at"], unique=False)

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "session_id",
            sa.String(64),
            sa.ForeignKey("sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("mood", sa.String(16), nullable=True),
        sa.Column("mode", sa.String(16), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_conversations_session_timestamp", "conversations", ["session_id", "timestamp"], unique=False
    )
    op.create_index("ix_conversations_mood", "conversations", ["mood"], unique=False)
    op.create_index("ix_conversations_mode", "conversations", ["mode"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_conversations_mode", table_name="conversations")
    op.drop_index("ix_conversations_mood", table_name="conversations")
    op.drop_index("ix_conversations_session_timestamp", table_name="conversations")
    op.drop_table("conversations")
    op.drop_index("ix_sessions_updated_at", table_name="sessions")
    op.drop_table("sessions")
