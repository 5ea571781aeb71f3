#!/usr/bin/env python3
"""
GeoCache Walkthrough - Complete Record Lifecycle

Creates a cache, logs visits inside and outside its geofence, exchanges
trackables, files reports, shows owner-only access and deletes the cache,
all against the in-memory store.

Run with: python examples/geocache_walkthrough.py
"""

from geocache import (
    GeoCacheContract,
    GeoCacheError,
    GeoCacheService,
    InMemoryStateStore,
    NotOwnerError,
    OutOfRangeError,
    SeededRandomSource,
    Trackable,
    TransactionContext,
    User,
    verify,
)
from geocache.logging_config import configure_logging


def section(title: str) -> None:
    print("\n" + "-" * 70)
    print(title)
    print("-" * 70)


def main():
    print("=" * 70)
    print("GeoCache Registry - Walkthrough")
    print("=" * 70)

    configure_logging(level="WARNING", json_format=False)

    # =========================================================================
    # SETUP
    # =========================================================================

    print("\n[SETUP] In-memory world state, seeded randomness")

    store = InMemoryStateStore()
    ctx = TransactionContext(store=store, random=SeededRandomSource("walkthrough"))
    contract = GeoCacheContract()
    service = GeoCacheService(contract)

    alice = User(id="alice-device-8842", name="Alice")
    bob = User(id="bob-device-1290", name="Bob")
    mallory = User(id="mallory-device-0001", name="Mallory")

    # =========================================================================
    # SCENARIO 1: Create
    # =========================================================================

    section("SCENARIO 1: Alice hides a cache under the old oak")

    contract.create(ctx, alice, "oak-1", "Old Oak", "Under the roots", (5, 10), (5, 10), "brass coin")
    cache = contract.read(ctx, "oak-1")

    print(f"  Name:        {cache.name}")
    print(f"  Geofence:    x {cache.x_coord_range}, y {cache.y_coord_range}")
    print(f"  Trackable:   {cache.trackable.id} ({cache.trackable.value})")
    print(f"  Owner salt:  {cache.owner.salt}")
    print(f"  Commitment:  {cache.owner.commitment}")
    print(f"  Alice verifies as owner: {verify(alice.id, cache.owner.salt, cache.owner.commitment)}")

    # =========================================================================
    # SCENARIO 2: Visits
    # =========================================================================

    section("SCENARIO 2: Bob visits")

    try:
        contract.add_visitor(ctx, bob, "oak-1", 10, 7)
    except OutOfRangeError as e:
        print(f"  ✗ {e.code}: {e.message}")

    previous = service.log_visit(ctx, bob, "oak-1", 7, 7, Trackable(id="t-bob", value="enamel pin"))
    print(f"  ✓ Bob logged at (7, 7) and took {previous.id} ({previous.value})")

    cache = contract.read(ctx, "oak-1")
    print(f"  Visitors:    {[v.name for v in cache.visitors]}")
    print(f"  Trackable:   {cache.trackable.id} ({cache.trackable.value})")

    # =========================================================================
    # SCENARIO 3: Ownership
    # =========================================================================

    section("SCENARIO 3: Mallory tries to take over")

    for attempt in [
        lambda: contract.update_descriptive(ctx, mallory, "oak-1", "Mallory's Oak", ""),
        lambda: contract.update_coordinates(ctx, mallory, "oak-1", (0, 1000), (0, 1000)),
        lambda: contract.delete(ctx, mallory, "oak-1"),
    ]:
        try:
            attempt()
        except NotOwnerError as e:
            print(f"  ✗ {e.code}: {e.message}")

    contract.update_descriptive(ctx, alice, "oak-1", "Hollow Oak", "In the hollow, two meters up")
    print(f"  ✓ Alice renamed the cache to {contract.read(ctx, 'oak-1').name!r}")

    # =========================================================================
    # SCENARIO 4: Reports
    # =========================================================================

    section("SCENARIO 4: Reports")

    contract.report(ctx, bob, "Lid is cracked, logbook is wet", "oak-1")
    contract.report(ctx, mallory, "Cache is missing", "oak-1")

    try:
        contract.get_reports(ctx, bob, "oak-1")
    except NotOwnerError as e:
        print(f"  ✗ {e.code}: {e.message}")

    for report in contract.get_reports(ctx, alice, "oak-1"):
        print(f"  Report {report.id} from {report.notifier.name}: {report.message}")

    # =========================================================================
    # SCENARIO 5: Delete
    # =========================================================================

    section("SCENARIO 5: Alice archives the cache")

    contract.delete(ctx, alice, "oak-1")
    print(f"  Exists after delete: {contract.exists(ctx, 'oak-1')}")

    try:
        contract.read(ctx, "oak-1")
    except GeoCacheError as e:
        print(f"  ✗ {e.code}: {e.message}")

    print("\n" + "=" * 70)
    print("Walkthrough Complete")
    print("=" * 70)


if __name__ == "__main__":
    main()
