"""Maintenance command line for kvlite databases.

Usage:
    kvlite [--config PATH] [--padlock] tables FILE [--namespace NS ...]
    kvlite [--config PATH] [--padlock] namespaces FILE [--namespace NS ...] [--all]
    kvlite [--config PATH] [--padlock] keys FILE TABLE [--namespace NS ...]
    kvlite [--config PATH] crypt-reset FILE --yes
"""
from __future__ import annotations

import argparse
import sys
from getpass import getpass
from typing import Iterable, List, Optional

from kvlite.config import load_config
from kvlite.errors import KVLiteError
from kvlite.logging_config import configure_logging
from kvlite.namespace import SEP
from kvlite.store import crypt_reset, open_store


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="kvlite", description="Inspect and maintain kvlite databases")
    p.add_argument("--config", help="Path to a kvlite YAML config file")
    p.add_argument("--padlock", action="store_true", help="Prompt for the database padlock")
    sub = p.add_subparsers(dest="command", required=True)

    def add_file_and_namespace(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("file", help="Database file")
        sp.add_argument("--namespace", action="append", default=[],
                        help="Descend into a namespace (repeat for nesting)")

    tables = sub.add_parser("tables", help="List tables")
    add_file_and_namespace(tables)

    namespaces = sub.add_parser("namespaces", help="List sub-namespaces")
    add_file_and_namespace(namespaces)
    namespaces.add_argument("--all", action="store_true", help="List every nested table, not just first-level names")

    keys = sub.add_parser("keys", help="List keys in a table")
    add_file_and_namespace(keys)
    keys.add_argument("table", help="Table name")

    reset = sub.add_parser("crypt-reset", help="Delete all encrypted values and forget the master key")
    reset.add_argument("file", help="Database file")
    reset.add_argument("--yes", action="store_true", help="Confirm that encrypted values may be deleted")
    return p


def _listing(args: argparse.Namespace, padlock: Optional[str]) -> List[str]:
    cfg = load_config(args.config)
    with open_store(args.file, padlock, config=cfg) as store:
        ns = store
        for name in args.namespace:
            ns = ns.sub(name)
        if args.command == "tables":
            return ns.tables()
        if args.command == "namespaces":
            return ns.namespaces(limit_depth=not args.all)
        return ns.keys(args.table)


def _print_lines(lines: Iterable[str]) -> None:
    for line in lines:
        print(line.replace(SEP, "/"))


def main(argv: Optional[List[str]] = None) -> int:
    args = get_parser().parse_args(argv)
    configure_logging(args.config)

    try:
        if args.command == "crypt-reset":
            if not args.yes:
                print("Refusing to reset without --yes: encrypted values will be deleted", file=sys.stderr)
                return 2
            removed = crypt_reset(args.file, config=load_config(args.config))
            print(f"Removed {removed} encrypted records from {args.file}")
            return 0

        padlock = getpass("Padlock (input hidden): ") if args.padlock else None
        _print_lines(_listing(args, padlock))
        return 0
    except KVLiteError as e:
        print(f"kvlite: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
