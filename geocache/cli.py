#!/usr/bin/env python3
"""
GeoCache Command Line Interface

Usage:
    geocache create --key <key> --caller-id <id> --name <name> --x 5 10 --y 5 10 --trackable <value>
    geocache read --key <key>
    geocache update --key <key> --caller-id <id> --name <name> [--description <text>]
    geocache move --key <key> --caller-id <id> --x 7 12 --y 7 12
    geocache visit --key <key> --caller-id <id> --at 6 6
    geocache switch --key <key> --trackable-id <id> --trackable-value <value>
    geocache delete --key <key> --caller-id <id>
    geocache report --key <key> --caller-id <id> --message <text>
    geocache reports --key <key> --caller-id <id>
    geocache exists --key <key>
    geocache commit --id <raw id> --salt <salt>

Every command except `commit` runs against a SQLite world state (--db).
With GEOCACHE_RANDOM_SEED set, salts and identifiers are derived from the
seed and --invocation-id, which defaults to a fresh id per run.
"""

import argparse
import json
import sys
from typing import List, Optional

from . import config
from .context import TransactionContext
from .contract import GeoCacheContract
from .errors import GeoCacheError
from .identity import commit
from .logging_config import configure_logging, set_invocation_id
from .models import Trackable, User
from .store import SqliteStateStore


def emit(data) -> None:
    print(json.dumps(data, indent=2))


def _context(args) -> TransactionContext:
    store = SqliteStateStore(args.db)
    invocation_id = set_invocation_id(args.invocation_id)
    return TransactionContext(
        store=store,
        random=config.get_random_source(invocation_id),
        invocation_id=invocation_id
    )


def _caller(args) -> User:
    return User(id=args.caller_id, name=args.caller_name or "")


def cmd_create(args, contract: GeoCacheContract) -> int:
    ctx = _context(args)
    contract.create(
        ctx, _caller(args), args.key, args.name, args.description,
        args.x, args.y, args.trackable
    )
    emit(contract.read(ctx, args.key).model_dump(mode="json"))
    return 0


def cmd_read(args, contract: GeoCacheContract) -> int:
    emit(contract.read(_context(args), args.key).model_dump(mode="json"))
    return 0


def cmd_update(args, contract: GeoCacheContract) -> int:
    ctx = _context(args)
    contract.update_descriptive(ctx, _caller(args), args.key, args.name, args.description)
    emit(contract.read(ctx, args.key).model_dump(mode="json"))
    return 0


def cmd_move(args, contract: GeoCacheContract) -> int:
    ctx = _context(args)
    contract.update_coordinates(ctx, _caller(args), args.key, args.x, args.y)
    emit(contract.read(ctx, args.key).model_dump(mode="json"))
    return 0


def cmd_visit(args, contract: GeoCacheContract) -> int:
    x, y = args.at
    contract.add_visitor(_context(args), _caller(args), args.key, x, y)
    emit({"key": args.key, "status": "VISITED"})
    return 0


def cmd_switch(args, contract: GeoCacheContract) -> int:
    trackable = Trackable(id=args.trackable_id, value=args.trackable_value)
    previous = contract.switch_trackable(_context(args), trackable, args.key)
    emit(previous.model_dump(mode="json"))
    return 0


def cmd_delete(args, contract: GeoCacheContract) -> int:
    contract.delete(_context(args), _caller(args), args.key)
    emit({"key": args.key, "status": "DELETED"})
    return 0


def cmd_report(args, contract: GeoCacheContract) -> int:
    contract.report(_context(args), _caller(args), args.message, args.key)
    emit({"key": args.key, "status": "REPORTED"})
    return 0


def cmd_reports(args, contract: GeoCacheContract) -> int:
    reports = contract.get_reports(_context(args), _caller(args), args.key)
    emit([r.model_dump(mode="json") for r in reports])
    return 0


def cmd_exists(args, contract: GeoCacheContract) -> int:
    emit({"key": args.key, "exists": contract.exists(_context(args), args.key)})
    return 0


def cmd_commit(args, contract: GeoCacheContract) -> int:
    emit({"salt": args.salt, "commitment": commit(args.id, args.salt)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geocache",
        description="GeoCache registry command line interface"
    )
    parser.add_argument("--db", default=config.DB_PATH, help="SQLite world state path")
    parser.add_argument("--log-level", default="WARNING", help="Log level")
    parser.add_argument(
        "--invocation-id",
        default=None,
        help="Invocation id shared by replicas (generated when omitted)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def keyed(name: str, help_text: str, caller: bool = False) -> argparse.ArgumentParser:
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--key", required=True, help="Cache key")
        if caller:
            p.add_argument("--caller-id", required=True, help="Caller raw identifier")
            p.add_argument("--caller-name", default="", help="Caller display name")
        return p

    p = keyed("create", "Create a cache", caller=True)
    p.add_argument("--name", required=True)
    p.add_argument("--description", default="")
    p.add_argument("--x", type=int, nargs=2, required=True, metavar=("MIN", "MAX"))
    p.add_argument("--y", type=int, nargs=2, required=True, metavar=("MIN", "MAX"))
    p.add_argument("--trackable", required=True, help="Value of the initial trackable")
    p.set_defaults(func=cmd_create)

    p = keyed("read", "Read a cache")
    p.set_defaults(func=cmd_read)

    p = keyed("update", "Rename or redescribe a cache (owner)", caller=True)
    p.add_argument("--name", required=True)
    p.add_argument("--description", default="")
    p.set_defaults(func=cmd_update)

    p = keyed("move", "Change a cache's coordinate ranges (owner)", caller=True)
    p.add_argument("--x", type=int, nargs=2, required=True, metavar=("MIN", "MAX"))
    p.add_argument("--y", type=int, nargs=2, required=True, metavar=("MIN", "MAX"))
    p.set_defaults(func=cmd_move)

    p = keyed("visit", "Log a visit at a position", caller=True)
    p.add_argument("--at", type=int, nargs=2, required=True, metavar=("X", "Y"))
    p.set_defaults(func=cmd_visit)

    p = keyed("switch", "Exchange the cache's trackable")
    p.add_argument("--trackable-id", required=True)
    p.add_argument("--trackable-value", default="")
    p.set_defaults(func=cmd_switch)

    p = keyed("delete", "Delete a cache (owner)", caller=True)
    p.set_defaults(func=cmd_delete)

    p = keyed("report", "Report a cache", caller=True)
    p.add_argument("--message", required=True)
    p.set_defaults(func=cmd_report)

    p = keyed("reports", "List a cache's reports (owner)", caller=True)
    p.set_defaults(func=cmd_reports)

    p = keyed("exists", "Check whether a cache exists")
    p.set_defaults(func=cmd_exists)

    p = subparsers.add_parser("commit", help="Compute an ownership commitment")
    p.add_argument("--id", required=True, help="Raw identifier")
    p.add_argument("--salt", required=True)
    p.set_defaults(func=cmd_commit)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_format=config.LOG_JSON)

    try:
        return args.func(args, GeoCacheContract())
    except GeoCacheError as e:
        print(f"✗ {e.code}: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
