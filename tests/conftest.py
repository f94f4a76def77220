from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from config import Config
from log_store import LogStore
from persistence import JsonFileBackend, MemoryBackend
from validator import LogValidator


class FakeClock:
    """Returns a time one second later on every call."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 12, 8, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def sample_log():
    return {"user": "alice", "timeIn": "09:00", "hubstaffTime": 8}


@pytest.fixture
def config():
    return Config(environ={})


@pytest.fixture
def validator(config):
    return LogValidator(config["records"]["required_fields"])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_file(tmp_path):
    return str(tmp_path / "timelogs.json")


@pytest.fixture
def store(validator, config, clock):
    return LogStore(
        MemoryBackend(),
        validator,
        defaults=config["records"]["defaults"],
        time_func=clock,
    )


@pytest.fixture
def file_store_factory(config, data_file, clock):
    """Build a file-backed store; call again to simulate a restart."""

    def factory():
        return LogStore(
            JsonFileBackend(data_file),
            LogValidator(config["records"]["required_fields"]),
            defaults=config["records"]["defaults"],
            time_func=clock,
        )

    return factory


@pytest.fixture
def app(config, file_store_factory):
    """Create a Flask test app backed by a temporary data file."""
    application = create_app(config, store=file_store_factory())
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
