"""
GeoCache error kinds.

Every failure of a lifecycle operation is raised as exactly one
GeoCacheError subclass carrying the record key involved. None of them are
retried by this layer.
"""

from typing import Any, Dict, Optional


class GeoCacheError(Exception):
    """Base class for all lifecycle failures."""

    code = "GEOCACHE_ERROR"
    http_status = 500

    def __init__(self, message: str, key: Optional[str] = None):
        self.message = message
        self.key = key
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "key": self.key}


class StoreReadError(GeoCacheError):
    """The underlying store failed to read."""
    code = "STORE_READ_FAILED"
    http_status = 503

    def __init__(self, key: str, reason: str = ""):
        message = f"Could not read {key} from the store"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, key)


class StoreWriteError(GeoCacheError):
    """The underlying store failed to write or delete."""
    code = "STORE_WRITE_FAILED"
    http_status = 503

    def __init__(self, key: str, reason: str = ""):
        message = f"Could not write {key} to the store"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, key)


class AlreadyExistsError(GeoCacheError):
    code = "ALREADY_EXISTS"
    http_status = 409

    def __init__(self, key: str):
        super().__init__(f"The cache {key} already exists", key)


class NotFoundError(GeoCacheError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, key: str):
        super().__init__(f"The cache {key} does not exist", key)


class DeserializationError(GeoCacheError):
    """Stored bytes do not match the record shape."""
    code = "DESERIALIZATION_FAILED"
    http_status = 500

    def __init__(self, key: str, reason: str = ""):
        message = f"Could not parse stored data for {key} as a GeoCache"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, key)


class NotOwnerError(GeoCacheError):
    code = "NOT_OWNER"
    http_status = 403

    def __init__(self, key: str, operation: str = "modify"):
        self.operation = operation
        super().__init__(f"Only the owner can {operation} the cache {key}", key)


class OutOfRangeError(GeoCacheError):
    """Visitor coordinates fall outside the cache's geofence."""
    code = "OUT_OF_RANGE"
    http_status = 422

    def __init__(self, key: str, x: int, y: int):
        self.x = x
        self.y = y
        super().__init__(f"Position ({x}, {y}) is not inside the range of cache {key}", key)


class InvalidRangeError(GeoCacheError):
    """A coordinate range whose lower bound exceeds its upper bound."""
    code = "INVALID_RANGE"
    http_status = 400

    def __init__(self, key: str, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be [min, max] with min <= max, got {value}", key)


class ValidationError(GeoCacheError):
    """Malformed argument supplied by the caller."""
    code = "VALIDATION_FAILED"
    http_status = 400

    def __init__(self, field: str, message: str, key: Optional[str] = None):
        self.field = field
        super().__init__(f"{field}: {message}", key)
