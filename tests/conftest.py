import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from notiapp_backend.config.loader import reset_config
from notiapp_backend.core.engine import ScheduleEngine
from notiapp_backend.core.errors import RemoteError
from notiapp_backend.core.logger import reset_logging
from notiapp_backend.core.models import Schedule
from notiapp_backend.core.repository import ScheduleRepository
from notiapp_backend.core.session import SessionContext
from notiapp_backend.stores import InMemoryAuthProvider, InMemoryStore

EMAIL = "ana@example.com"
PASSWORD = "secret1"


@pytest.fixture(autouse=True)
def notiapp_config(tmp_path, monkeypatch):
    """Point the config loader at a throwaway memory-backend config file"""
    config_file = tmp_path / "config.toml"
    logs_dir = tmp_path / "logs"
    config_file.write_text(
        f"""
[server]
host = "127.0.0.1"
port = 8000
debug = false

[logging]
level = "DEBUG"
logs_dir = '{logs_dir}'
max_file_size = "1MB"
backup_count = 1

[remote]
backend = "memory"
timeout = 5.0

[schedules]
collection = "schedules"
missing_document_policy = "ignore"
""",
        encoding="utf-8",
    )
    monkeypatch.setenv("NOTIAPP_CONFIG", str(config_file))
    reset_config()
    yield config_file
    reset_config()
    reset_logging()


class GatedStore(InMemoryStore):
    """InMemoryStore whose queries snapshot their result, then wait to be released"""

    def __init__(self):
        super().__init__()
        self.gated = False
        self.gates = []
        self.fail_calls = set()
        self.query_calls = 0

    async def query(self, collection, filters):
        call = self.query_calls
        self.query_calls += 1
        results = await super().query(collection, filters)
        if self.gated:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()
        if call in self.fail_calls:
            raise RemoteError("Could not reach the server. Please try again.")
        return results


async def wait_until(predicate, attempts=200):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


async def signed_in(store=None, policy="ignore"):
    """Provider, session and engine with a freshly signed-up user; no fetch yet"""
    provider = InMemoryAuthProvider()
    session = SessionContext(provider)
    session.start()
    await session.sign_up(EMAIL, PASSWORD)
    store = store if store is not None else InMemoryStore()
    repository = ScheduleRepository(store, missing_document_policy=policy)
    engine = ScheduleEngine(repository, session)
    return provider, session, store, engine


def make_schedule(schedule_id, minutes_ago=0, **overrides):
    values = {
        "id": schedule_id,
        "owner_id": "u1",
        "title": f"Schedule {schedule_id}",
        "date": "2030-01-01",
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc)
        - timedelta(minutes=minutes_ago),
    }
    values.update(overrides)
    return Schedule(**values)
