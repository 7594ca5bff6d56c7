"""
Taskbot — SQLite storage.

One small store per aggregate: accounts, groups (with membership edges)
and tasks (with their file attachments). All of them share the database
file at settings.DATABASE_PATH and create their own tables on first use.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from taskbot.data.models import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    Account,
    Attachment,
    Group,
    GroupMember,
    Task,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


class _SQLiteStore:
    """Connection handling shared by the stores below."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from taskbot.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_db(self) -> None:
        raise NotImplementedError


class AccountDB(_SQLiteStore):
    """Telegram accounts, keyed by their external numeric id."""

    _MUTABLE_FIELDS = ("username", "first_name", "last_name", "is_bot", "language_code")

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    id             INTEGER PRIMARY KEY AUTOINCREMENT,
                    telegram_id    INTEGER NOT NULL UNIQUE,
                    username       TEXT,
                    first_name     TEXT,
                    last_name      TEXT,
                    is_bot         INTEGER NOT NULL DEFAULT 0,
                    language_code  TEXT,
                    created_at     TEXT NOT NULL,
                    updated_at     TEXT NOT NULL
                )
            """)
        logger.debug("Accounts table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> Account:
        return Account(
            id=row["id"],
            telegram_id=row["telegram_id"],
            username=row["username"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            is_bot=bool(row["is_bot"]),
            language_code=row["language_code"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def upsert_account(
        self,
        telegram_id: int,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        is_bot: bool = False,
        language_code: str | None = None,
    ) -> Account:
        """Create the account or overwrite every mutable field (last write wins)."""
        now = _now()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO accounts
                    (telegram_id, username, first_name, last_name,
                     is_bot, language_code, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(telegram_id) DO UPDATE SET
                    username      = excluded.username,
                    first_name    = excluded.first_name,
                    last_name     = excluded.last_name,
                    is_bot        = excluded.is_bot,
                    language_code = excluded.language_code,
                    updated_at    = excluded.updated_at
                """,
                (
                    telegram_id, username, first_name, last_name,
                    int(is_bot), language_code, now, now,
                ),
            )
            row = conn.execute(
                "SELECT * FROM accounts WHERE telegram_id = ?", (telegram_id,)
            ).fetchone()
        logger.debug("Account upserted: %d", telegram_id)
        return self._row_to_account(row)

    def create_account(
        self,
        telegram_id: int,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        is_bot: bool = False,
        language_code: str | None = None,
    ) -> Account:
        """Insert a new account. Raises sqlite3.IntegrityError if it already exists."""
        now = _now()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO accounts
                    (telegram_id, username, first_name, last_name,
                     is_bot, language_code, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    telegram_id, username, first_name, last_name,
                    int(is_bot), language_code, now, now,
                ),
            )
            account_id = cursor.lastrowid

        logger.info("Account created: #%d (telegram_id=%d)", account_id, telegram_id)
        return Account(
            id=account_id,
            telegram_id=telegram_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            is_bot=is_bot,
            language_code=language_code,
            created_at=now,
            updated_at=now,
        )

    def get_by_telegram_id(self, telegram_id: int) -> Account | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE telegram_id = ?", (telegram_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_account(row)

    def list_accounts(self) -> list[Account]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM accounts ORDER BY id").fetchall()
        return [self._row_to_account(r) for r in rows]

    def update_account(self, telegram_id: int, **changes) -> Account | None:
        """Overwrite only the supplied fields. Returns None if the account is unknown."""
        unknown = set(changes) - set(self._MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)}")

        if "is_bot" in changes:
            changes["is_bot"] = int(bool(changes["is_bot"]))

        assignments = [f"{name} = ?" for name in changes]
        params: list = list(changes.values())
        assignments.append("updated_at = ?")
        params.append(_now())
        params.append(telegram_id)

        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE accounts SET {', '.join(assignments)} WHERE telegram_id = ?",
                params,
            )
        if cursor.rowcount == 0:
            return None
        logger.info("Account %d updated: %s", telegram_id, sorted(changes))
        return self.get_by_telegram_id(telegram_id)

    def delete_account(self, telegram_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM accounts WHERE telegram_id = ?", (telegram_id,)
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Account %d deleted", telegram_id)
        return deleted


class GroupDB(_SQLiteStore):
    """Group chats and the accounts seen posting in them."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS telegram_groups (
                    id                INTEGER PRIMARY KEY AUTOINCREMENT,
                    telegram_chat_id  INTEGER NOT NULL UNIQUE,
                    title             TEXT    NOT NULL,
                    type              TEXT    NOT NULL,
                    is_active         INTEGER NOT NULL DEFAULT 1,
                    created_at        TEXT    NOT NULL,
                    updated_at        TEXT    NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS group_members (
                    group_id    INTEGER NOT NULL
                                REFERENCES telegram_groups(id) ON DELETE CASCADE,
                    account_id  INTEGER NOT NULL,
                    is_admin    INTEGER NOT NULL DEFAULT 0,
                    created_at  TEXT    NOT NULL,
                    UNIQUE (group_id, account_id)
                )
            """)
        logger.debug("Group tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_group(row: sqlite3.Row) -> Group:
        return Group(
            id=row["id"],
            telegram_chat_id=row["telegram_chat_id"],
            title=row["title"],
            type=row["type"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def upsert_group(self, telegram_chat_id: int, title: str, chat_type: str) -> Group:
        """Create the group or refresh its title/type and mark it active."""
        now = _now()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO telegram_groups
                    (telegram_chat_id, title, type, is_active, created_at, updated_at)
                VALUES (?, ?, ?, 1, ?, ?)
                ON CONFLICT(telegram_chat_id) DO UPDATE SET
                    title      = excluded.title,
                    type       = excluded.type,
                    is_active  = 1,
                    updated_at = excluded.updated_at
                """,
                (telegram_chat_id, title, chat_type, now, now),
            )
            row = conn.execute(
                "SELECT * FROM telegram_groups WHERE telegram_chat_id = ?",
                (telegram_chat_id,),
            ).fetchone()
        return self._row_to_group(row)

    def get_group(self, telegram_chat_id: int) -> Group | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM telegram_groups WHERE telegram_chat_id = ?",
                (telegram_chat_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_group(row)

    def ensure_member(self, group_id: int, account_id: int, is_admin: bool = False) -> bool:
        """Attach an account to a group once. Returns True if the edge was new."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO group_members (group_id, account_id, is_admin, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (group_id, account_id, int(is_admin), _now()),
            )
        added = cursor.rowcount > 0
        if added:
            logger.info("Account #%d joined group #%d", account_id, group_id)
        return added

    def list_members(self, group_id: int) -> list[GroupMember]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM group_members WHERE group_id = ? ORDER BY created_at",
                (group_id,),
            ).fetchall()
        return [
            GroupMember(
                group_id=r["group_id"],
                account_id=r["account_id"],
                is_admin=bool(r["is_admin"]),
                created_at=r["created_at"],
            )
            for r in rows
        ]


class TaskDB(_SQLiteStore):
    """Tasks scoped to their owning account, plus task attachments."""

    _UPDATABLE_FIELDS = ("title", "description", "status", "priority", "due_date")

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id           INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_id   INTEGER NOT NULL,
                    title        TEXT    NOT NULL CHECK (length(title) > 0),
                    description  TEXT,
                    status       TEXT    NOT NULL DEFAULT 'pending'
                                 CHECK (status IN ('pending', 'in_progress', 'completed', 'cancelled')),
                    priority     TEXT    NOT NULL DEFAULT 'medium'
                                 CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
                    due_date     TEXT,
                    created_at   TEXT    NOT NULL,
                    updated_at   TEXT    NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_account ON tasks (account_id)"
            )
            conn.execute("""
                CREATE TABLE IF NOT EXISTS task_files (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id     INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    file_name   TEXT    NOT NULL,
                    file_path   TEXT    NOT NULL,
                    file_type   TEXT,
                    file_size   INTEGER NOT NULL DEFAULT 0,
                    created_at  TEXT    NOT NULL
                )
            """)
        logger.debug("Task tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            account_id=row["account_id"],
            title=row["title"],
            description=row["description"],
            status=row["status"],
            priority=row["priority"],
            due_date=row["due_date"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_attachment(row: sqlite3.Row) -> Attachment:
        return Attachment(
            id=row["id"],
            task_id=row["task_id"],
            file_name=row["file_name"],
            file_path=row["file_path"],
            file_type=row["file_type"],
            file_size=row["file_size"],
            created_at=row["created_at"],
        )

    def _load_files(self, conn: sqlite3.Connection, tasks: list[Task]) -> None:
        if not tasks:
            return
        by_id = {t.id: t for t in tasks}
        placeholders = ", ".join("?" for _ in by_id)
        rows = conn.execute(
            f"SELECT * FROM task_files WHERE task_id IN ({placeholders}) ORDER BY id",
            list(by_id),
        ).fetchall()
        for r in rows:
            by_id[r["task_id"]].files.append(self._row_to_attachment(r))

    # -- tasks ---------------------------------------------------------------

    def create_task(
        self,
        account_id: int,
        title: str,
        description: str | None = None,
        status: str = DEFAULT_STATUS,
        priority: str = DEFAULT_PRIORITY,
        due_date: str | None = None,
    ) -> Task:
        now = _now()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO tasks
                    (account_id, title, description, status, priority,
                     due_date, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (account_id, title, description, status, priority, due_date, now, now),
            )
            task_id = cursor.lastrowid

        logger.info("Task created: #%d '%s' for account #%d", task_id, title, account_id)
        return Task(
            id=task_id,
            account_id=account_id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=now,
            updated_at=now,
        )

    def get_task(self, task_id: int, account_id: int) -> Task | None:
        """Fetch a task only if it belongs to account_id."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND account_id = ?",
                (task_id, account_id),
            ).fetchone()
            if row is None:
                return None
            task = self._row_to_task(row)
            self._load_files(conn, [task])
        return task

    def list_tasks(
        self,
        account_id: int,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        """Return an account's tasks newest first, optionally filtered."""
        query = "SELECT * FROM tasks WHERE account_id = ?"
        params: list = [account_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        if priority is not None:
            query += " AND priority = ?"
            params.append(priority)
        if search:
            query += (
                " AND (instr(lower(title), lower(?)) > 0"
                " OR instr(lower(coalesce(description, '')), lower(?)) > 0)"
            )
            params.extend([search, search])
        query += " ORDER BY created_at DESC, id DESC"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
            tasks = [self._row_to_task(r) for r in rows]
            self._load_files(conn, tasks)
        return tasks

    def update_task(self, task_id: int, account_id: int, **changes) -> Task | None:
        """Overwrite only the supplied fields. Returns None if not found or not owned."""
        unknown = set(changes) - set(self._UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown task fields: {sorted(unknown)}")
        if changes:
            assignments = [f"{name} = ?" for name in changes]
            params: list = list(changes.values())
            assignments.append("updated_at = ?")
            params.append(_now())
            params.extend([task_id, account_id])

            with self._connect() as conn:
                cursor = conn.execute(
                    f"UPDATE tasks SET {', '.join(assignments)} "
                    "WHERE id = ? AND account_id = ?",
                    params,
                )
            if cursor.rowcount == 0:
                return None
            logger.info("Task #%d updated: %s", task_id, sorted(changes))
        return self.get_task(task_id, account_id)

    def delete_task(self, task_id: int, account_id: int) -> bool:
        """Delete a task and, through the foreign key, its attachment rows."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM tasks WHERE id = ? AND account_id = ?",
                (task_id, account_id),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Task #%d deleted", task_id)
        return deleted

    # -- attachments ---------------------------------------------------------

    def add_file(
        self,
        task_id: int,
        file_name: str,
        file_path: str,
        file_type: str | None,
        file_size: int,
    ) -> Attachment:
        now = _now()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO task_files
                    (task_id, file_name, file_path, file_type, file_size, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (task_id, file_name, file_path, file_type, file_size, now),
            )
            file_id = cursor.lastrowid
        logger.info("File #%d '%s' attached to task #%d", file_id, file_name, task_id)
        return Attachment(
            id=file_id,
            task_id=task_id,
            file_name=file_name,
            file_path=file_path,
            file_type=file_type,
            file_size=file_size,
            created_at=now,
        )

    def list_files(self, task_id: int) -> list[Attachment]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM task_files WHERE task_id = ? ORDER BY id", (task_id,)
            ).fetchall()
        return [self._row_to_attachment(r) for r in rows]

    def get_file(self, task_id: int, file_id: int) -> Attachment | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM task_files WHERE id = ? AND task_id = ?",
                (file_id, task_id),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_attachment(row)

    def delete_file(self, task_id: int, file_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM task_files WHERE id = ? AND task_id = ?",
                (file_id, task_id),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("File #%d removed from task #%d", file_id, task_id)
        return deleted
