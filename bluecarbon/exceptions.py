from typing import Any, List, Optional


class BlueCarbonError(Exception):
    """Base exception for the field registry core."""
    pass


class ValidationError(BlueCarbonError):
    """Raised when submitted data breaks a required-field or reference rule.

    ``field`` is the first offending field; ``fields`` lists every field
    that was found invalid (at least ``field``).
    """

    def __init__(self, field: str, message: str, fields: Optional[List[str]] = None) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.fields = fields or [field]


class NotFoundError(BlueCarbonError):
    """Raised when an update targets an identifier that does not exist."""

    def __init__(self, collection: str, record_id: Any) -> None:
        super().__init__(f"No record {record_id!r} in collection '{collection}'")
        self.collection = collection
        self.record_id = record_id


class PersistenceError(BlueCarbonError):
    """Raised when the durable write of a collection fails."""
    pass


class NoConnectionError(BlueCarbonError):
    """Raised when a manual sync is requested while offline."""
    pass


class PushFailure(BlueCarbonError):
    """A single record push was rejected, failed or timed out."""

    def __init__(self, collection: str, record_id: Any, reason: str) -> None:
        super().__init__(f"Push of {collection}#{record_id} failed: {reason}")
        self.collection = collection
        self.record_id = record_id
        self.reason = reason
