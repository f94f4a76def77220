"""Log record model."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

MANAGED_KEYS = ("id", "createdAt", "updatedAt")


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format *now* (default: current UTC time) as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@dataclass
class LogRecord:
    id: int
    fields: dict = field(default_factory=dict)
    created_at: str = field(default_factory=utc_timestamp)
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Flatten into the wire form: id, fields, createdAt, updatedAt."""
        data = {"id": self.id}
        data.update(self.fields)
        data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    def copy(self) -> "LogRecord":
        return LogRecord(
            id=self.id,
            fields=dict(self.fields),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "LogRecord":
        """Parse the flat wire form.

        Records written by older versions carry ``timestamp`` instead of
        ``createdAt``; it is read as the creation time.
        """
        if not isinstance(data, dict):
            raise ValueError(f"log record must be an object, got {type(data).__name__}")

        record_id = data.get("id")
        # bool is an int subclass
        if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id < 0:
            raise ValueError(f"invalid log record id: {record_id!r}")

        fields = {k: v for k, v in data.items() if k not in MANAGED_KEYS}
        created_at = data.get("createdAt")
        if created_at is None:
            created_at = fields.pop("timestamp", None)
        if created_at is None:
            raise ValueError(f"log record {record_id} has no createdAt")

        return cls(
            id=record_id,
            fields=fields,
            created_at=created_at,
            updated_at=data.get("updatedAt"),
        )
