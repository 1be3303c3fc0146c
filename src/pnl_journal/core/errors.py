"""Custom exception hierarchy for the journal."""


class JournalError(Exception):
    """Base exception for all journal errors."""


# --- Configuration ---
class ConfigError(JournalError):
    """Invalid or missing configuration."""


# --- Input ---
class FormValidationError(JournalError):
    """Raw form input rejected before it reaches the engines."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


# --- Storage ---
class StorageError(JournalError):
    """Record store could not be read or written."""


class RecordNotFoundError(StorageError):
    """No record with the requested id."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class DuplicateMonthError(StorageError):
    """A month record already exists for the month key."""

    def __init__(self, month: str):
        self.month = month
        super().__init__(f"Month {month} already exists")
