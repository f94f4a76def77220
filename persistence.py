"""Durable storage for the log store.

The file backend keeps the whole ordered record list as one JSON array and
rewrites it on every save with an atomic write (tmp + os.replace).
"""

import json
import logging
import os
import tempfile

from errors import PersistenceError

logger = logging.getLogger(__name__)


class JsonFileBackend:
    name = "file"

    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> list[dict]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            logger.info("%s not found, starting with an empty store", self._path)
            return []
        except OSError as exc:
            raise PersistenceError(f"cannot read {self._path}: {exc}") from exc

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"{self._path} is not valid JSON: {exc}") from exc

        if not isinstance(data, list):
            raise PersistenceError(
                f"{self._path} must hold a JSON array, got {type(data).__name__}"
            )
        return data

    def save(self, records: list[dict]) -> None:
        try:
            self._write(records)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Cannot write %s: %s", self._path, exc)
            raise PersistenceError(f"cannot write {self._path}: {exc}") from exc

    def _write(self, records: list[dict]) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        try:
            mode = os.stat(self._path).st_mode & 0o777
        except FileNotFoundError:
            mode = 0o644

        fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, allow_nan=False)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp, mode)
            os.replace(tmp, self._path)
        except Exception:
            os.unlink(tmp)
            raise


class MemoryBackend:
    """Keeps the last saved snapshot in process memory only."""

    name = "memory"

    def __init__(self, records=None):
        self._snapshot = list(records or [])

    def load(self) -> list[dict]:
        return list(self._snapshot)

    def save(self, records: list[dict]) -> None:
        self._snapshot = list(records)


def create_backend(storage_config: dict):
    """Build the backend named by ``storage_config["backend"]``."""
    backend = storage_config.get("backend", "file")
    if backend == "file":
        return JsonFileBackend(storage_config["data_file"])
    if backend == "memory":
        return MemoryBackend()
    raise ValueError(f"unknown storage backend: {backend!r}")
