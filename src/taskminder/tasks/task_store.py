# src/taskminder/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from ..errors import InvalidArgumentError, NotFoundError
from .task_models import TaskPriority, TaskRecord, TaskStatus

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Timestamps are stored as ISO-8601 text.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    due_time TEXT NOT NULL,
                    reminder_time TEXT NOT NULL,
                    priority TEXT NOT NULL DEFAULT 'MEDIUM',
                    status TEXT NOT NULL DEFAULT 'NOT_STARTED',
                    created_time TEXT NOT NULL,
                    last_modified_time TEXT NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("priority", "TEXT NOT NULL DEFAULT 'MEDIUM'")
            add_col("status", "TEXT NOT NULL DEFAULT 'NOT_STARTED'")
            add_col("last_modified_time", "TEXT NOT NULL DEFAULT ''")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _ts(value: datetime) -> str:
        return value.isoformat()

    @staticmethod
    def _parse_ts(raw: str | None, fallback: datetime | None = None) -> datetime | None:
        if not raw:
            return fallback
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Unparseable timestamp in tasks table: %r", raw)
            return fallback

    def _row_to_task(self, row: sqlite3.Row) -> TaskRecord:
        created = self._parse_ts(row["created_time"]) or datetime.now()
        try:
            priority = TaskPriority.coerce(row["priority"])
        except ValueError:
            priority = TaskPriority.MEDIUM
        return TaskRecord(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            due_time=self._parse_ts(row["due_time"]),
            reminder_time=self._parse_ts(row["reminder_time"]),
            priority=priority,
            status=TaskStatus.from_db(row["status"]),
            created_time=created,
            last_modified_time=self._parse_ts(row["last_modified_time"], created),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def save(self, task: TaskRecord) -> None:
        """Insert a new task; a duplicate id raises sqlite3.IntegrityError."""
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, description, due_time, reminder_time,
                    priority, status, created_time, last_modified_time
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    self._ts(task.due_time),
                    self._ts(task.reminder_time),
                    task.priority.value,
                    task.status.value,
                    self._ts(task.created_time),
                    self._ts(task.last_modified_time or task.created_time),
                ),
            )
            conn.commit()
            logger.debug("Task saved id=%s priority=%s", task.id, task.priority.value)
        finally:
            conn.close()

    def update(self, task: TaskRecord) -> None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?,
                    description = ?,
                    due_time = ?,
                    reminder_time = ?,
                    priority = ?,
                    status = ?,
                    last_modified_time = ?
                WHERE id = ?
                """,
                (
                    task.title,
                    task.description,
                    self._ts(task.due_time),
                    self._ts(task.reminder_time),
                    task.priority.value,
                    task.status.value,
                    self._ts(task.last_modified_time or task.created_time),
                    task.id,
                ),
            )
            conn.commit()
            if cur.rowcount != 1:
                raise NotFoundError(f"task {task.id} is not stored")
            logger.debug("Task updated id=%s status=%s", task.id, task.status.value)
        finally:
            conn.close()

    def delete(self, task_id: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
            deleted = cur.rowcount == 1
            logger.debug("Task delete id=%s deleted=%s", task_id, deleted)
            return deleted
        finally:
            conn.close()

    def get_by_id(self, task_id: str) -> TaskRecord | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def load_all(self) -> list[TaskRecord]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks ORDER BY created_time ASC")
            rows = cur.fetchall()
        finally:
            conn.close()

        tasks: list[TaskRecord] = []
        for row in rows:
            try:
                tasks.append(self._row_to_task(row))
            except InvalidArgumentError:
                logger.warning("Skipping unreadable task row id=%s", row["id"])
        return tasks
