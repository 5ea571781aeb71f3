"""
GeoCache visit service.

Composes contract operations into the flow a visitor performs on site:
register the visit, then swap trackables with the cache.
"""

from typing import Optional

from .context import TransactionContext
from .contract import GeoCacheContract
from .models import Trackable, User


class GeoCacheService:
    """Higher-level flows built on GeoCacheContract."""

    def __init__(self, contract: Optional[GeoCacheContract] = None):
        self.contract = contract or GeoCacheContract()

    def log_visit(
        self,
        ctx: TransactionContext,
        caller: User,
        key: str,
        x: int,
        y: int,
        trackable: Trackable
    ) -> Trackable:
        """
        Log the caller in the cache and exchange trackables.

        Returns:
            The trackable the cache held before the exchange

        Raises:
            OutOfRangeError: position outside the geofence; no exchange happens
        """
        self.contract.add_visitor(ctx, caller, key, x, y)
        return self.contract.switch_trackable(ctx, trackable, key)
