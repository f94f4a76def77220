"""Error kinds raised by the log store."""


class LogStoreError(Exception):
    """Base class for all log store failures."""


class ValidationError(LogStoreError):
    """Request is missing required fields or carries malformed values."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid log fields.")


class NotFoundError(LogStoreError):
    def __init__(self, record_id):
        self.record_id = record_id
        super().__init__(f"Time log with ID {record_id} not found.")


class PersistenceError(LogStoreError):
    """Reading or writing the durable store failed."""
