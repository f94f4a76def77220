"""Ordered, durable store of time log records."""

import logging
import threading
from datetime import datetime, timezone

from errors import NotFoundError, PersistenceError, ValidationError
from models import LogRecord, utc_timestamp

logger = logging.getLogger(__name__)


class LogStore:
    """Thread-safe CRUD store over an insertion-ordered list of LogRecords.

    Every mutation writes the full record list to the backend before it is
    committed in memory, so a failed write leaves the store as it was.
    """

    def __init__(self, backend, validator, defaults=None, time_func=None):
        self._backend = backend
        self._validator = validator
        self._defaults = dict(defaults or {})
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._records = self._rehydrate(backend.load())
        logger.info("Loaded %d log record(s) from %s storage", len(self._records), backend.name)

    @staticmethod
    def _rehydrate(entries):
        records = []
        seen = set()
        for entry in entries:
            try:
                record = LogRecord.from_dict(entry)
            except ValueError as exc:
                raise PersistenceError(f"corrupt log record: {exc}") from exc
            if record.id in seen:
                raise PersistenceError(f"duplicate log record id: {record.id}")
            seen.add(record.id)
            records.append(record)
        return records

    @property
    def validator(self):
        return self._validator

    @property
    def backend_name(self):
        return self._backend.name

    @property
    def count(self):
        """Number of records currently held."""
        return len(self._records)

    def _now(self):
        return utc_timestamp(self._time_func())

    def _next_id(self):
        return max((r.id for r in self._records), default=0) + 1

    def _index_of(self, record_id):
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError(record_id)

    def _prepare(self, data):
        if not isinstance(data, dict):
            raise ValidationError(["Log fields must be a JSON object."])
        return self._validator.coerce(data)

    def _commit(self, records):
        """Persist *records* and, only if that succeeds, make them current."""
        self._backend.save([r.to_dict() for r in records])
        self._records = records

    def _ordered(self, fields):
        known = self._validator.known_fields
        ordered = {k: fields[k] for k in known if k in fields}
        ordered.update({k: v for k, v in fields.items() if k not in ordered})
        return ordered

    def create(self, data):
        """Validate *data*, assign the next id and persist the new record."""
        fields = self._prepare(data)
        for key, default in self._defaults.items():
            if fields.get(key) in (None, ""):
                fields[key] = default

        with self._lock:
            is_valid, errors = self._validator.validate_create(fields)
            if not is_valid:
                raise ValidationError(errors)

            record = LogRecord(
                id=self._next_id(),
                fields=self._ordered(fields),
                created_at=self._now(),
            )
            self._commit(self._records + [record])

        logger.info("New log created: %d", record.id)
        return record.copy()

    def list(self):
        """All records in insertion order."""
        with self._lock:
            return [r.copy() for r in self._records]

    def get(self, record_id):
        with self._lock:
            return self._records[self._index_of(record_id)].copy()

    def update(self, record_id, data):
        """Merge the supplied fields into an existing record.

        Only schema-declared fields are merged; ``id`` and ``createdAt`` are
        always kept from the stored record.
        """
        with self._lock:
            index = self._index_of(record_id)
            fields = self._prepare(data)
            is_valid, errors = self._validator.validate_update(fields)
            if not is_valid:
                raise ValidationError(errors)

            current = self._records[index]
            merged = dict(current.fields)
            merged.update(fields)
            record = LogRecord(
                id=current.id,
                fields=merged,
                created_at=current.created_at,
                updated_at=self._now(),
            )
            records = list(self._records)
            records[index] = record
            self._commit(records)

        logger.info("Log updated: %d", record.id)
        return record.copy()

    def delete(self, record_id):
        with self._lock:
            index = self._index_of(record_id)
            self._commit(self._records[:index] + self._records[index + 1:])

        logger.info("Log deleted: %d", record_id)
