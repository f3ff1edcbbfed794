"""Create show and episode tables with pg_notify change triggers.

Revision ID: 3f1a9c2b7d10
Revises:
Create Date: 2026-10-19

Row triggers publish {"operation": TG_OP, "id": <row id>} on show_changes
and episode_changes after every INSERT/UPDATE/DELETE. Episode rows removed
by the show FK cascade fire their own DELETE notifications.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "3f1a9c2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TRIGGERS = (
    ("show", "show_changes"),
    ("episode", "episode_changes"),
)


def _notify_function(channel: str) -> str:
    """Return SQL for a trigger function publishing row changes on channel."""
    return f"""
    CREATE OR REPLACE FUNCTION notify_{channel}()
    RETURNS TRIGGER
    LANGUAGE plpgsql
    AS $$
    DECLARE
        row_id TEXT;
    BEGIN
        IF TG_OP = 'DELETE' THEN
            row_id := OLD.id;
        ELSE
            row_id := NEW.id;
        END IF;
        PERFORM pg_notify(
            '{channel}',
            json_build_object('operation', TG_OP, 'id', row_id)::text
        );
        RETURN NULL;
    END;
    $$
    """


def upgrade() -> None:
    op.create_table(
        "show",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("language", sa.String(length=10), nullable=False),
        sa.Column("thumbnail_url", sa.String(length=2048), nullable=True),
        sa.Column("cover_image_url", sa.String(length=2048), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_show_category", "show", ["category"])
    op.create_index("ix_show_language", "show", ["language"])

    op.create_table(
        "episode",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("show_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("audio_url", sa.String(length=2048), nullable=False),
        sa.Column("thumbnail_url", sa.String(length=2048), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["show_id"], ["show.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("show_id", "episode_number", name="uq_episode_show_number"),
    )
    op.create_index("ix_episode_show_id", "episode", ["show_id"])

    for table, channel in _TRIGGERS:
        op.execute(_notify_function(channel))
        op.execute(
            f"CREATE TRIGGER {table}_notify_change "
            f"AFTER INSERT OR UPDATE OR DELETE ON {table} "
            f"FOR EACH ROW EXECUTE PROCEDURE notify_{channel}()"
        )


def downgrade() -> None:
    for table, channel in _TRIGGERS:
        op.execute(f"DROP TRIGGER IF EXISTS {table}_notify_change ON {table}")
        op.execute(f"DROP FUNCTION IF EXISTS notify_{channel}()")
    op.drop_index("ix_episode_show_id", table_name="episode")
    op.drop_table("episode")
    op.drop_index("ix_show_language", table_name="show")
    op.drop_index("ix_show_category", table_name="show")
    op.drop_table("show")
