"""Create todos table

Revision ID: 001
Revises: None
Create Date: 2026-01-04

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import text

revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()

    # category holds a JSON array of labels; timestamps are ISO strings
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS todos (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL CHECK (length(title) > 0 AND length(title) <= 200),
            description TEXT,
            priority TEXT NOT NULL DEFAULT 'medium' CHECK (priority IN ('low', 'medium', 'high')),
            category TEXT NOT NULL DEFAULT '[]',
            completed INTEGER NOT NULL DEFAULT 0,
            created_date TEXT NOT NULL,
            due_date TEXT,
            updated_at TEXT NOT NULL
        )
    """))

    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_todos_user_id ON todos (user_id)"))
    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_todos_user_completed ON todos (user_id, completed)"))
    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_todos_due_date ON todos (due_date)"))
    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_todos_created_date ON todos (created_date DESC)"))


def downgrade() -> None:
    conn = op.get_bind()
    conn.execute(text("DROP TABLE IF EXISTS todos"))
