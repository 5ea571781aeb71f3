"""
GeoCache Registry

Version: 1.0.0
License: Apache 2.0

Business logic for a shared registry of geolocated caches.

Each cache record, stored under an external key, carries:
    - a name and description
    - x and y coordinate ranges (the geofence)
    - an owner commitment: H^100(raw_id || salt), never the raw id
    - one exchangeable trackable
    - an append-only visitor log and an append-only report log

Every operation is a single read-modify-write against a key-addressed
store. Owner-only operations prove ownership by recomputing the commitment
from the caller's raw identifier and the stored salt.

Usage:
    from geocache import (
        GeoCacheContract,
        InMemoryStateStore,
        TransactionContext,
        Trackable,
        User,
    )

    contract = GeoCacheContract()
    ctx = TransactionContext(store=InMemoryStateStore())

    alice = User(id="alice-raw-id", name="Alice")
    contract.create(ctx, alice, "oak-1", "Old Oak", "Under the roots",
                    (5, 10), (5, 10), "brass coin")

    # Anyone strictly inside the range can log a visit
    contract.add_visitor(ctx, User(id="bob"), "oak-1", 6, 6)

    # ... and swap trackables
    previous = contract.switch_trackable(ctx, Trackable(id="t-2", value="pin"), "oak-1")

    # Only the owner sees the reports
    reports = contract.get_reports(ctx, alice, "oak-1")
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Identity commitment
from .identity import (
    HASH_ROUNDS,
    commit,
    derive_salt,
    verify,
)

# Randomness
from .randomness import (
    RandomSource,
    SystemRandomSource,
    SeededRandomSource,
)

# Record schema
from .models import (
    SCHEMA_VERSION,
    GeoCache,
    Owner,
    Report,
    Trackable,
    User,
)

# Stores
from .store import (
    StateStore,
    InMemoryStateStore,
    SqliteStateStore,
    RedisStateStore,
)

# Errors
from .errors import (
    GeoCacheError,
    StoreReadError,
    StoreWriteError,
    AlreadyExistsError,
    NotFoundError,
    DeserializationError,
    NotOwnerError,
    OutOfRangeError,
    InvalidRangeError,
    ValidationError,
)

# Lifecycle
from .context import TransactionContext
from .contract import GeoCacheContract
from .service import GeoCacheService


__all__ = [
    # Version
    "__version__",

    # Identity
    "HASH_ROUNDS",
    "commit",
    "derive_salt",
    "verify",

    # Randomness
    "RandomSource",
    "SystemRandomSource",
    "SeededRandomSource",

    # Models
    "SCHEMA_VERSION",
    "GeoCache",
    "Owner",
    "Report",
    "Trackable",
    "User",

    # Stores
    "StateStore",
    "InMemoryStateStore",
    "SqliteStateStore",
    "RedisStateStore",

    # Errors
    "GeoCacheError",
    "StoreReadError",
    "StoreWriteError",
    "AlreadyExistsError",
    "NotFoundError",
    "DeserializationError",
    "NotOwnerError",
    "OutOfRangeError",
    "InvalidRangeError",
    "ValidationError",

    # Lifecycle
    "TransactionContext",
    "GeoCacheContract",
    "GeoCacheService",
]
