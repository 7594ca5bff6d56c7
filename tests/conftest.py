"""Shared test fixtures and configuration.

Sets up fake environment variables so taskbot.config doesn't sys.exit(),
and provides temp-file-backed stores, a recording message sender and a
mode store driven by a fake clock.
"""

import os

# Patch env vars BEFORE any taskbot imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("MODE_STORE", "memory")
os.environ.setdefault("MAX_UPLOAD_BYTES", "1024")

import pytest


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSender:
    """MessageSender that remembers everything instead of calling Telegram."""

    def __init__(self) -> None:
        self.messages: list[tuple[int, str, object]] = []
        self.answered: list[str] = []

    async def send_message(self, chat_id, text, reply_markup=None):
        self.messages.append((chat_id, text, reply_markup))
        return None

    async def answer_callback(self, callback_id):
        self.answered.append(callback_id)

    @property
    def texts(self) -> list[str]:
        return [text for _, text, _ in self.messages]

    @property
    def last_text(self) -> str:
        return self.messages[-1][1]

    @property
    def last_markup(self):
        return self.messages[-1][2]


def make_sender_payload(user_id=555, first_name="Ann", **extra):
    payload = {"id": user_id, "first_name": first_name, "is_bot": False}
    payload.update(extra)
    return payload


def make_message_update(text, user_id=555, chat_id=None, chat_type="private", **chat_extra):
    chat = {"id": chat_id if chat_id is not None else user_id, "type": chat_type}
    chat.update(chat_extra)
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "chat": chat,
            "from": make_sender_payload(user_id),
            "text": text,
        },
    }


def make_callback_update(data, user_id=555, chat_id=None, callback_id="cb-1"):
    return {
        "update_id": 2,
        "callback_query": {
            "id": callback_id,
            "data": data,
            "from": make_sender_payload(user_id),
            "message": {
                "message_id": 11,
                "chat": {"id": chat_id if chat_id is not None else user_id, "type": "private"},
            },
        },
    }


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_taskbot.db")


@pytest.fixture
def account_db(tmp_db_path):
    from taskbot.data.db import AccountDB
    return AccountDB(db_path=tmp_db_path)


@pytest.fixture
def group_db(tmp_db_path):
    from taskbot.data.db import GroupDB
    return GroupDB(db_path=tmp_db_path)


@pytest.fixture
def task_db(tmp_db_path):
    from taskbot.data.db import TaskDB
    return TaskDB(db_path=tmp_db_path)


@pytest.fixture
def file_storage(tmp_path):
    from taskbot.data.file_storage import FileStorage
    return FileStorage(root=str(tmp_path / "files"))


@pytest.fixture
def task_service(task_db, file_storage):
    from taskbot.core.task_service import TaskService
    return TaskService(task_db, file_storage)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mode_store(clock):
    from taskbot.adapters.mode_store import InMemoryModeStore
    return InMemoryModeStore(ttl_seconds=3600, clock=clock)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def router(account_db, group_db, task_service, mode_store, sender):
    from taskbot.bot.router import UpdateRouter
    return UpdateRouter(
        accounts=account_db,
        groups=group_db,
        tasks=task_service,
        modes=mode_store,
        sender=sender,
    )


@pytest.fixture
def services(account_db, group_db, task_service, router):
    from taskbot.api.dependencies import Services
    return Services(
        accounts=account_db,
        groups=group_db,
        tasks=task_service,
        router=router,
        bot=None,
    )


@pytest.fixture
def client(services):
    from fastapi.testclient import TestClient
    from taskbot.api.app import create_app
    return TestClient(create_app(services))
