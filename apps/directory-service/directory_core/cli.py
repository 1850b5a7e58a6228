"""Operator command line for the directory store."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Optional

from directory_core.store import ENTITIES, DirectoryStore, get_directory_store
from directory_core.store import queries

logger = logging.getLogger("directory_core.cli")

_COLUMNS: dict[str, tuple[str, ...]] = {
    "commission": ("id", "name_ar", "name_en", "code"),
    "district": ("id", "name", "code", "commission_name"),
    "group": ("id", "town_name", "name", "district_name", "commission_name"),
    "band": ("id", "name", "code", "group_name", "district_name", "commission_name"),
    "member": ("id", "name", "code", "civil_id", "phone_number", "band_ids"),
}


def _parse_assignments(pairs: list[str] | None) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected key=value, got '{pair}'")
        values[key.strip()] = value
    return values


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="directory-admin", description="Manage the organizational directory")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the directory tables on the configured database")
    sub.add_parser("summary", help="Show how many records each collection holds")

    list_parser = sub.add_parser("list", help="List one collection")
    list_parser.add_argument("entity", choices=ENTITIES)
    list_parser.add_argument("--search", help="Case-insensitive text to match against the searchable columns")
    list_parser.add_argument("--commission", help="Only rows under this commission id")
    list_parser.add_argument("--district", help="Only rows under this district id")
    list_parser.add_argument("--group", help="Only bands under this group id")
    list_parser.add_argument("--band", help="Only members of this band id")

    add_parser = sub.add_parser("add", help="Create a record")
    add_parser.add_argument("entity", choices=ENTITIES)
    add_parser.add_argument("--set", dest="assignments", action="append", metavar="KEY=VALUE", default=[])
    add_parser.add_argument("--bands", nargs="*", help="Band ids for a new member")

    update_parser = sub.add_parser("update", help="Change fields of a record")
    update_parser.add_argument("entity", choices=ENTITIES)
    update_parser.add_argument("id")
    update_parser.add_argument("--set", dest="assignments", action="append", metavar="KEY=VALUE", default=[])
    update_parser.add_argument(
        "--bands",
        nargs="*",
        help="Replace a member's bands; pass the flag with no ids to remove all",
    )

    delete_parser = sub.add_parser("delete", help="Delete a record and refresh dependent collections")
    delete_parser.add_argument("entity", choices=ENTITIES)
    delete_parser.add_argument("id")
    return parser.parse_args(argv)


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (set, frozenset)):
        return ",".join(sorted(value)) or "-"
    return str(value)


def _print_rows(entity: str, records: list[Any]) -> None:
    columns = _COLUMNS[entity]
    print("\t".join(columns))
    for record in records:
        print("\t".join(_format_value(getattr(record, column, None)) for column in columns))


def _filtered(store: DirectoryStore, args: argparse.Namespace) -> list[Any]:
    entity = args.entity
    if entity == "commission":
        records = list(store.commissions)
    elif entity == "district":
        records = queries.districts_for_commission(store.districts, args.commission)
    elif entity == "group":
        records = queries.filter_groups(
            store.groups, store.districts, commission_id=args.commission, district_id=args.district
        )
    elif entity == "band":
        records = queries.filter_bands(
            store.bands, commission_id=args.commission, district_id=args.district, group_id=args.group
        )
    else:
        records = list(store.members)
        if args.band:
            records = queries.members_of_band(records, args.band)
    return queries.search_entity(entity, records, args.search)


def _report_failure(store: DirectoryStore, entity: Optional[str] = None) -> int:
    message = store.status(entity).error if entity else None
    print(f"error: {message or store.error or 'operation failed'}", file=sys.stderr)
    return 1


async def run(args: argparse.Namespace, store: Optional[DirectoryStore] = None) -> int:
    if args.command == "init-db":
        from directory_core.db.database import get_engine, init_schema

        init_schema(get_engine())
        print("Directory tables are in place.")
        return 0

    store = store or get_directory_store()

    if args.command == "summary":
        if not await store.fetch_all():
            return _report_failure(store)
        for entity, count in queries.directory_counts(store.snapshot()).items():
            print(f"{entity}\t{count}")
        return 0

    if args.command == "list":
        needs = {args.entity}
        if args.entity == "group" and args.commission:
            needs.add("district")
        for entity in sorted(needs):
            if not await store.fetch(entity):
                return _report_failure(store, entity)
        _print_rows(args.entity, _filtered(store, args))
        return 0

    if args.command == "add":
        payload: dict[str, Any] = _parse_assignments(args.assignments)
        if args.entity == "member" and args.bands:
            payload["band_ids"] = list(args.bands)
        ok = await store.add(args.entity, payload)
    elif args.command == "update":
        payload = _parse_assignments(args.assignments)
        if args.entity == "member" and args.bands is not None:
            payload["band_ids"] = list(args.bands)
        ok = await store.update(args.entity, args.id, payload)
    else:
        ok = await store.delete(args.entity, args.id)

    if not ok:
        return _report_failure(store, args.entity)
    logger.info("%s %s completed", args.command, args.entity)
    print(f"{args.command} {args.entity}: ok")
    return 0


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        level_name = os.getenv("LOG_LEVEL", "WARNING").upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.WARNING),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
