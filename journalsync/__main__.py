"""CLI entry point for journalsync."""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .config import Config, load_config
from .models import Mood
from .store import EntryStore
from .sync import EntryController, RemoteSyncClient, SyncResult


# Attributes the sync layer attaches through ``extra=``
ENTRY_LOG_FIELDS = ("operation", "entry_identifier", "error_type")


class JSONFormatter(logging.Formatter):
    """JSON lines formatter carrying the entry fields attached by the sync layer."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ENTRY_LOG_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_data, default=str)


def setup_logging(verbose: bool = False, log_level: str | None = None, json_output: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging (ignored if log_level is set).
        log_level: Explicit log level (warning, info, debug).
        json_output: Output logs as JSON lines for machine parsing.
    """
    if log_level:
        level_map = {
            "warning": logging.WARNING,
            "info": logging.INFO,
            "debug": logging.DEBUG,
        }
        level = level_map.get(log_level, logging.INFO)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logging.basicConfig(level=level, handlers=[handler])


def build_controller(config: Config, pull_on_start: bool | None = None) -> EntryController:
    """Wire a controller from configuration."""
    store = EntryStore(config.store.db_path)
    remote = RemoteSyncClient(
        config.remote.base_url,
        timeout=config.remote.timeout_seconds,
    )
    return EntryController(
        store,
        remote,
        pull_on_start=config.sync.pull_on_start if pull_on_start is None else pull_on_start,
        assign_identifiers=config.sync.assign_identifiers,
    )


def _report(result: SyncResult, action: str) -> int:
    if result.ok:
        return 0
    print(f"{action} failed ({result.status.value}): {result.error}", file=sys.stderr)
    return 1


async def cmd_pull(args: argparse.Namespace) -> int:
    """Pull the remote collection into the local store."""
    config = load_config(args.config)

    async with build_controller(config, pull_on_start=False) as controller:
        result = await controller.pull_from_remote()

    if result.ok:
        print(f"Pulled {result.entries_pulled} entries from {config.remote.base_url}")
    return _report(result, "Pull")


async def cmd_list(args: argparse.Namespace) -> int:
    """List local entries."""
    config = load_config(args.config)

    async with build_controller(config) as controller:
        entries = controller.store.list_entries(limit=args.limit)

    if not entries:
        print("No entries")
        return 0

    for entry in entries:
        identifier = entry.identifier or "(local only)"
        print(f"{identifier}  {entry.timestamp:%Y-%m-%d %H:%M}  {entry.mood:<8} {entry.title}")
    return 0


async def cmd_add(args: argparse.Namespace) -> int:
    """Create an entry and push it."""
    config = load_config(args.config)

    async with build_controller(config) as controller:
        result = await controller.create(args.title, args.body, args.mood)

    if result.entry is not None and result.entry.pk is not None:
        print(f"Created entry {result.entry.identifier or '(local only)'}")
    return _report(result, "Push")


async def cmd_edit(args: argparse.Namespace) -> int:
    """Update an entry and push it."""
    config = load_config(args.config)

    async with build_controller(config) as controller:
        entry = controller.store.fetch_by_identifier(args.identifier)
        if entry is None:
            print(f"No entry with identifier {args.identifier}", file=sys.stderr)
            return 1

        result = await controller.update(
            entry,
            title=args.title if args.title is not None else entry.title,
            body_text=args.body if args.body is not None else entry.body_text,
            mood=args.mood if args.mood is not None else entry.mood,
        )

    return _report(result, "Update")


async def cmd_delete(args: argparse.Namespace) -> int:
    """Delete an entry locally and remotely."""
    config = load_config(args.config)

    async with build_controller(config) as controller:
        entry = controller.store.fetch_by_identifier(args.identifier)
        if entry is None:
            print(f"No entry with identifier {args.identifier}", file=sys.stderr)
            return 1

        result = await controller.delete(entry)

    return _report(result, "Remote delete")


async def cmd_status(args: argparse.Namespace) -> int:
    """Show sync status."""
    config = load_config(args.config)

    async with build_controller(config) as controller:
        status = controller.get_sync_status()
        initial_pull = controller.initial_pull

    if initial_pull is not None:
        status["initial_pull"] = initial_pull.status.value
        if initial_pull.error:
            status["initial_pull_error"] = str(initial_pull.error)

    if args.json:
        print(json.dumps(status, indent=2))
    else:
        for key, value in status.items():
            print(f"{key}: {value}")
    return 0


def main() -> int:
    """Main entry point."""
    moods = [m.value for m in Mood]

    parser = argparse.ArgumentParser(
        prog="journalsync",
        description="Journal entries kept locally and mirrored to a remote JSON store",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: built-in defaults)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json",
        dest="json_logs",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    pull_parser = subparsers.add_parser("pull", help="Merge remote entries into the local store")
    pull_parser.set_defaults(func=cmd_pull)

    list_parser = subparsers.add_parser("list", help="List local entries")
    list_parser.add_argument("-n", "--limit", type=int, default=None, help="Maximum entries to show")
    list_parser.set_defaults(func=cmd_list)

    add_parser = subparsers.add_parser("add", help="Create an entry")
    add_parser.add_argument("title", help="Entry title")
    add_parser.add_argument("-b", "--body", default="", help="Entry body text")
    add_parser.add_argument("-m", "--mood", choices=moods, default=Mood.NEUTRAL.value)
    add_parser.set_defaults(func=cmd_add)

    edit_parser = subparsers.add_parser("edit", help="Update an entry")
    edit_parser.add_argument("identifier", help="Entry identifier")
    edit_parser.add_argument("-t", "--title", default=None)
    edit_parser.add_argument("-b", "--body", default=None)
    edit_parser.add_argument("-m", "--mood", choices=moods, default=None)
    edit_parser.set_defaults(func=cmd_edit)

    delete_parser = subparsers.add_parser("delete", help="Delete an entry")
    delete_parser.add_argument("identifier", help="Entry identifier")
    delete_parser.set_defaults(func=cmd_delete)

    status_parser = subparsers.add_parser("status", help="Show sync status")
    status_parser.add_argument(
        "--json",
        action="store_true",
        help="Output status as JSON",
    )
    status_parser.set_defaults(func=cmd_status)

    args = parser.parse_args()

    setup_logging(args.verbose, args.log_level, args.json_logs)

    if not args.command:
        parser.print_help()
        return 1

    return asyncio.run(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
