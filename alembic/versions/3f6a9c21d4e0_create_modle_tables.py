"""Create Modle tables

Revision ID: 3f6a9c21d4e0
Revises:
Create Date: 2026-10-19 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f6a9c21d4e0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("username", sa.String(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=True),
            sa.Column("modle_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("modle_best_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("modle_last_played", sa.Date(), nullable=True),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "modle_puzzles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("language", sa.String(), nullable=False),
        sa.Column("index", sa.Integer(), nullable=False),
        sa.Column("answer", sa.String(), nullable=False),
        sa.Column("hints", sa.JSON(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("language", "index", name="uq_modle_puzzles_language_index"),
    )
    op.create_index("ix_modle_puzzles_id", "modle_puzzles", ["id"])
    op.create_index("ix_modle_puzzles_language", "modle_puzzles", ["language"])

    op.create_table(
        "modle_daily_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("play_date", sa.Date(), nullable=False),
        sa.Column("language", sa.String(), nullable=False),
        sa.Column("correct", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("guesses", sa.JSON(), nullable=False),
        sa.Column("guesses_status", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", "play_date", name="uq_modle_entries_user_date"),
    )
    op.create_index("ix_modle_daily_entries_id", "modle_daily_entries", ["id"])
    op.create_index("ix_modle_daily_entries_user_id", "modle_daily_entries", ["user_id"])
    op.create_index("ix_modle_daily_entries_play_date", "modle_daily_entries", ["play_date"])

    op.create_table(
        "modle_daily_puzzles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("language", sa.String(), nullable=False),
        sa.Column("play_date", sa.Date(), nullable=False),
        sa.Column("puzzle_id", sa.Integer(), sa.ForeignKey("modle_puzzles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("language", "play_date", name="uq_modle_daily_puzzles_language_date"),
    )
    op.create_index("ix_modle_daily_puzzles_id", "modle_daily_puzzles", ["id"])


def downgrade() -> None:
    op.drop_table("modle_daily_puzzles")
    op.drop_table("modle_daily_entries")
    op.drop_table("modle_puzzles")
