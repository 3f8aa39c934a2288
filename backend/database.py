import sqlite3
import json
import os
from typing import Optional
from contextlib import contextmanager

from models import Todo
from temporal import now_kst

DATABASE_PATH = os.getenv("DATABASE_PATH", "todos.db")

@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

def init_db():
    """Initialize database by running Alembic migrations."""
    import subprocess

    # Run alembic upgrade from the backend directory
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=backend_dir,
        check=True
    )

def _row_to_todo(row) -> Todo:
    """Convert a database row to a Todo model."""
    # category is stored as a JSON array
    try:
        category = json.loads(row["category"]) if row["category"] else []
    except json.JSONDecodeError:
        category = []
    return Todo(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row["description"],
        created_date=row["created_date"],
        due_date=row["due_date"],
        priority=row["priority"],
        category=category,
        completed=bool(row["completed"]),
        updated_at=row["updated_at"],
    )

def _timestamp() -> str:
    return now_kst().isoformat()

def get_todos(user_id: str) -> list[Todo]:
    """All todos owned by user_id, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM todos WHERE user_id = ? ORDER BY created_date DESC",
            (user_id,)
        ).fetchall()
        return [_row_to_todo(row) for row in rows]

def get_todo(user_id: str, todo_id: str) -> Optional[Todo]:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM todos WHERE id = ? AND user_id = ?",
            (todo_id, user_id)
        ).fetchone()
        if row:
            return _row_to_todo(row)
    return None

def create_todo_db(
    todo_id: str,
    user_id: str,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[str] = None,
    priority: str = "medium",
    category: Optional[list[str]] = None,
    created_date: Optional[str] = None,
) -> Todo:
    """Create a todo for user_id.
    created_date defaults to now (KST); due_date is an ISO timestamp or None.
    """
    created_date = created_date or _timestamp()
    category = category or []

    with get_db() as conn:
        conn.execute(
            """INSERT INTO todos
               (id, user_id, title, description, priority, category, completed, created_date, due_date, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?, ?)""",
            (todo_id, user_id, title, description, priority, json.dumps(category, ensure_ascii=False),
             created_date, due_date, created_date)
        )
        conn.commit()

    return Todo(
        id=todo_id,
        user_id=user_id,
        title=title,
        description=description,
        created_date=created_date,
        due_date=due_date,
        priority=priority,
        category=category,
        completed=False,
        updated_at=created_date,
    )

def update_todo_db(user_id: str, todo_id: str, **updates) -> Optional[Todo]:
    """
    Update a todo with any fields provided.
    Only updates fields that differ from current values.

    Args:
        user_id: Owner of the todo; other users' todos are never touched
        todo_id: Todo ID to update
        **updates: Field names and values to update (title, description, due_date, priority, category, completed)
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM todos WHERE id = ? AND user_id = ?",
            (todo_id, user_id)
        ).fetchone()
        if not row:
            return None

        keys = row.keys()

        # Filter updates: only include fields that differ from current values
        changes = {}
        for field, new_value in updates.items():
            if field not in keys or field in ("id", "user_id", "created_date", "updated_at"):
                continue

            # Convert to the SQLite storage representation for comparison
            if isinstance(new_value, bool):
                new_value = int(new_value)
            elif field == "category":
                new_value = json.dumps(new_value or [], ensure_ascii=False)

            if new_value != row[field]:
                changes[field] = new_value

        # Execute UPDATE only if there are actual changes
        if changes:
            changes["updated_at"] = _timestamp()
            set_clause = ", ".join(f"{field} = ?" for field in changes.keys())
            values = list(changes.values()) + [todo_id, user_id]
            conn.execute(f"UPDATE todos SET {set_clause} WHERE id = ? AND user_id = ?", values)
            conn.commit()

        # Return updated todo (re-fetch to get current state)
        updated_row = conn.execute("SELECT * FROM todos WHERE id = ?", (todo_id,)).fetchone()
        return _row_to_todo(updated_row)

def delete_todo_db(user_id: str, todo_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM todos WHERE id = ? AND user_id = ?",
            (todo_id, user_id)
        )
        conn.commit()
        return cursor.rowcount > 0
