"""
GeoCache Record Lifecycle

The contract surface for cache records. Each operation is a single
read-modify-write against one store key:

    ABSENT --create--> EXISTS --delete--> ABSENT

All operations except `exists` and `create` require EXISTS.

Owner-gated: update_descriptive, update_coordinates, delete, get_reports
Open to any caller: read, add_visitor (geofenced), switch_trackable, report

The contract holds no state between calls; the store and randomness come
in through the TransactionContext.
"""

import logging
from typing import Any, List, Sequence

from .context import TransactionContext
from .errors import (
    AlreadyExistsError,
    DeserializationError,
    GeoCacheError,
    InvalidRangeError,
    NotFoundError,
    NotOwnerError,
    OutOfRangeError,
    StoreReadError,
    StoreWriteError,
)
from .identity import commit, derive_salt, verify
from .logging_config import audit_log
from .models import CoordRange, GeoCache, Owner, Report, Trackable, User

logger = logging.getLogger(__name__)


def check_range(key: str, field: str, value: Sequence[Any]) -> CoordRange:
    """
    Validate a [min, max] coordinate range.

    Raises:
        InvalidRangeError: not a pair of integers, or min > max
    """
    try:
        low, high = value
    except (TypeError, ValueError):
        raise InvalidRangeError(key, field, value)
    if isinstance(low, bool) or isinstance(high, bool):
        raise InvalidRangeError(key, field, value)
    if not isinstance(low, int) or not isinstance(high, int):
        raise InvalidRangeError(key, field, value)
    if low > high:
        raise InvalidRangeError(key, field, value)
    return (low, high)


class GeoCacheContract:
    """
    Lifecycle operations over GeoCache records.

    Usage:
        contract = GeoCacheContract()
        ctx = TransactionContext(store=InMemoryStateStore())

        contract.create(ctx, User(id="alice"), "cache-1", "Old Oak",
                        "Under the roots", (5, 10), (5, 10), "coin")
        contract.add_visitor(ctx, User(id="bob"), "cache-1", 6, 6)
    """

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    def _get_state(self, ctx: TransactionContext, key: str):
        try:
            data = ctx.store.get(key)
        except GeoCacheError:
            raise
        except Exception as e:
            audit_log.store_failure(key, "get", str(e))
            raise StoreReadError(key, str(e)) from e
        return data or None

    def _put_state(self, ctx: TransactionContext, key: str, geo_cache: GeoCache) -> None:
        payload = geo_cache.to_bytes()
        try:
            ctx.store.put(key, payload)
        except GeoCacheError:
            raise
        except Exception as e:
            audit_log.store_failure(key, "put", str(e))
            raise StoreWriteError(key, str(e)) from e
        logger.debug("wrote %d bytes under %s", len(payload), key)

    def _load(self, ctx: TransactionContext, key: str) -> GeoCache:
        data = self._get_state(ctx, key)
        if data is None:
            raise NotFoundError(key)
        try:
            return GeoCache.from_bytes(data)
        except ValueError as e:
            raise DeserializationError(key, str(e).splitlines()[0]) from e

    def _require_owner(self, caller: User, key: str, geo_cache: GeoCache, operation: str) -> None:
        owner = geo_cache.owner
        if not verify(caller.id, owner.salt, owner.commitment):
            audit_log.ownership_denied(key, caller.id, operation)
            raise NotOwnerError(key, operation)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def exists(self, ctx: TransactionContext, key: str) -> bool:
        """True when the store holds a value under key."""
        return self._get_state(ctx, key) is not None

    def create(
        self,
        ctx: TransactionContext,
        caller: User,
        key: str,
        name: str,
        description: str,
        x_coord_range: Sequence[int],
        y_coord_range: Sequence[int],
        trackable_value: str
    ) -> None:
        """
        Create a new cache owned by `caller`.

        The caller's raw id is bound to the record through a fresh salt and
        commitment; the trackable gets a fresh random id.

        Raises:
            InvalidRangeError: a range with min > max
            AlreadyExistsError: key already holds a record
            StoreReadError / StoreWriteError: store failure
        """
        x_range = check_range(key, "x_coord_range", x_coord_range)
        y_range = check_range(key, "y_coord_range", y_coord_range)

        if self.exists(ctx, key):
            raise AlreadyExistsError(key)

        salt = derive_salt(ctx.random)
        geo_cache = GeoCache(
            name=name,
            description=description,
            x_coord_range=x_range,
            y_coord_range=y_range,
            owner=Owner(commitment=commit(caller.id, salt), salt=salt, name=caller.name),
            trackable=Trackable(id=ctx.random.random_string(), value=trackable_value),
            visitors=[],
            reports=[],
        )

        self._put_state(ctx, key, geo_cache)
        audit_log.cache_created(key, caller.id)

    def read(self, ctx: TransactionContext, key: str) -> GeoCache:
        """Return the stored record. Public: no ownership check."""
        return self._load(ctx, key)

    def update_descriptive(
        self,
        ctx: TransactionContext,
        caller: User,
        key: str,
        name: str,
        description: str
    ) -> None:
        """Owner only: replace name and description, keep everything else."""
        geo_cache = self._load(ctx, key)
        self._require_owner(caller, key, geo_cache, "update")

        geo_cache.name = name
        geo_cache.description = description

        self._put_state(ctx, key, geo_cache)
        audit_log.cache_updated(key, ["name", "description"])

    def update_coordinates(
        self,
        ctx: TransactionContext,
        caller: User,
        key: str,
        x_coord_range: Sequence[int],
        y_coord_range: Sequence[int]
    ) -> None:
        """Owner only: replace both coordinate ranges, keep everything else."""
        geo_cache = self._load(ctx, key)
        self._require_owner(caller, key, geo_cache, "update")

        geo_cache.x_coord_range = check_range(key, "x_coord_range", x_coord_range)
        geo_cache.y_coord_range = check_range(key, "y_coord_range", y_coord_range)

        self._put_state(ctx, key, geo_cache)
        audit_log.cache_updated(key, ["x_coord_range", "y_coord_range"])

    def add_visitor(self, ctx: TransactionContext, caller: User, key: str, x: int, y: int) -> None:
        """
        Log `caller` as a visitor if (x, y) is strictly inside the ranges.

        A point on a boundary is outside.

        Raises:
            OutOfRangeError: position outside the geofence (nothing written)
        """
        geo_cache = self._load(ctx, key)

        if not geo_cache.contains(x, y):
            audit_log.visitor_rejected(key, caller.id, x, y)
            raise OutOfRangeError(key, x, y)

        geo_cache.visitors.append(caller.model_copy(deep=True))

        self._put_state(ctx, key, geo_cache)
        audit_log.visitor_admitted(key, caller.id, len(geo_cache.visitors))

    def switch_trackable(self, ctx: TransactionContext, trackable: Trackable, key: str) -> Trackable:
        """Put `trackable` into the cache and hand back the one it held."""
        geo_cache = self._load(ctx, key)

        previous = geo_cache.trackable
        geo_cache.trackable = trackable.model_copy(deep=True)

        self._put_state(ctx, key, geo_cache)
        audit_log.trackable_switched(key, previous.id, trackable.id)
        return previous

    def delete(self, ctx: TransactionContext, caller: User, key: str) -> None:
        """Owner only: remove the record from the store."""
        geo_cache = self._load(ctx, key)
        self._require_owner(caller, key, geo_cache, "delete")

        try:
            ctx.store.delete(key)
        except GeoCacheError:
            raise
        except Exception as e:
            audit_log.store_failure(key, "delete", str(e))
            raise StoreWriteError(key, str(e)) from e
        audit_log.cache_deleted(key)

    def report(self, ctx: TransactionContext, caller: User, message: str, key: str) -> None:
        """Append a report from any caller."""
        geo_cache = self._load(ctx, key)

        report = Report(
            id=ctx.random.random_string(),
            message=message,
            notifier=caller.model_copy(deep=True),
        )
        geo_cache.reports.append(report)

        self._put_state(ctx, key, geo_cache)
        audit_log.report_filed(key, report.id, len(geo_cache.reports))

    def get_reports(self, ctx: TransactionContext, caller: User, key: str) -> List[Report]:
        """Owner only: every report, in submission order."""
        geo_cache = self._load(ctx, key)
        self._require_owner(caller, key, geo_cache, "read the reports of")

        audit_log.reports_read(key, len(geo_cache.reports))
        return list(geo_cache.reports)
