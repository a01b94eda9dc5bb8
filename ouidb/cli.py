from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from ouidb.config import apply_config, load_config
from ouidb.database import OuiDatabase
from ouidb.errors import OuiError
from ouidb.log import get_logger, level_for_verbosity, setup_logging
from ouidb.models import VendorEntry

logger = get_logger("cli")


class _SourceAction(argparse.Action):
    """Store the path and remember which source flag was given on the command line."""

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        setattr(namespace, self.dest, values)
        namespace.source = self.dest


def _selected_source(args: argparse.Namespace) -> Optional[str]:
    # A flag typed on the command line beats any path set in a config file.
    if args.source:
        return args.source
    if args.db:
        return "db"
    if args.manuf:
        return "manuf"
    return None


def _open_database(args: argparse.Namespace) -> OuiDatabase:
    source = _selected_source(args)
    if source == "db":
        path = Path(args.db)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SystemExit(f"could not read exported database: {path}: {exc}") from exc
        return OuiDatabase.new_from_export(data)
    if source == "manuf":
        return OuiDatabase.new_from_file(args.manuf)
    raise SystemExit("one of --manuf or --db is required")


def _format_entry(entry: Optional[VendorEntry]) -> str:
    if entry is None:
        return "unknown"
    parts = [entry.short_name]
    if entry.long_name:
        parts.append(entry.long_name)
    if entry.comment:
        parts.append(f"({entry.comment})")
    return " ".join(parts)


def cmd_lookup(args: argparse.Namespace) -> None:
    db = _open_database(args)
    for mac in args.mac:
        print(f"{mac:>17} vendor={_format_entry(db.query_by_str(mac))}")


def cmd_dump(args: argparse.Namespace) -> None:
    if not args.manuf:
        raise SystemExit("--manuf is required for dump")
    if not args.output:
        raise SystemExit("--output is required for dump")
    db = OuiDatabase.new_from_file(args.manuf)
    data = db.export()
    reloaded = OuiDatabase.new_from_export(data)
    if len(reloaded) != len(db):
        raise SystemExit(
            f"export verification failed: {len(db)} entries built, {len(reloaded)} reloaded"
        )
    Path(args.output).write_bytes(data)
    print(f"dump entries={len(db)} bytes={len(data)} -> {args.output}")


def cmd_info(args: argparse.Namespace) -> None:
    db = _open_database(args)
    print(f"There are {len(db)} entries in the vendor database")


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--manuf", action=_SourceAction, help="Wireshark manuf file to load")
    group.add_argument("--db", action=_SourceAction, help="Previously exported database blob to load")
    parser.set_defaults(source=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ouidb",
        description="Resolve MAC addresses to IEEE vendors using the Wireshark manuf registry",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug, -vvv trace)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup_parser = subparsers.add_parser("lookup", help="Look up the vendor of MAC addresses")
    lookup_parser.add_argument("mac", nargs="+", help="MAC address, e.g. 00:50:c2:00:1f:ff")
    _add_source_args(lookup_parser)
    lookup_parser.set_defaults(func=cmd_lookup)

    dump_parser = subparsers.add_parser("dump", help="Export a manuf file to a binary database")
    _add_source_args(dump_parser)
    dump_parser.add_argument("--output", help="Path for the exported blob (required)")
    dump_parser.set_defaults(func=cmd_dump)

    info_parser = subparsers.add_parser("info", help="Show the number of database entries")
    _add_source_args(info_parser)
    info_parser.set_defaults(func=cmd_info)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    apply_config(parser, load_config())
    args = parser.parse_args(argv)
    setup_logging(level_for_verbosity(args.verbose))
    try:
        args.func(args)
    except OuiError as exc:
        logger.debug("command failed", exc_info=True)
        raise SystemExit(f"error: {exc}") from exc
    return 0


if __name__ == "__main__":
    sys.exit(main())
