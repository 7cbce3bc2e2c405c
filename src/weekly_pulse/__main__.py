# ABOUTME: CLI entry point for the Weekly Pulse update store.
# ABOUTME: Provides subcommands: init-db, template, save, show, list, teams, orgs.

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog

from weekly_pulse.config import get_settings


def configure_logging() -> None:
    """Configure structlog for console or JSON output."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def cmd_init_db(_args: argparse.Namespace) -> int:
    """Create all tables in the configured database."""
    from weekly_pulse.db.session import close_db, init_db

    log = structlog.get_logger()

    async def _run() -> None:
        try:
            await init_db()
        finally:
            await close_db()

    try:
        asyncio.run(_run())
    except Exception:
        log.exception("cmd_init_db_failed")
        return 1
    log.info("cmd_init_db_complete")
    return 0


def cmd_template(_args: argparse.Namespace) -> int:
    """Print the default weekly update document."""
    from weekly_pulse.document import default_document

    _print_json(default_document())
    return 0


def cmd_save(args: argparse.Namespace) -> int:
    """Save a weekly update document read from a JSON file.

    Week date, team and organization default to the document's meta block.
    """
    from weekly_pulse.db.session import close_db
    from weekly_pulse.errors import WeeklyPulseError
    from weekly_pulse.services import create_update_store

    log = structlog.get_logger()

    try:
        document = json.loads(Path(args.file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        log.error("document_read_failed", file=args.file, error=str(e))
        return 1

    if not isinstance(document, dict):
        log.error("document_not_an_object", file=args.file)
        return 1

    meta = document.get("meta") or {}
    store = create_update_store()

    async def _run():
        try:
            return await store.save_update(
                args.user,
                args.date or meta.get("date"),
                args.team or meta.get("team_name"),
                args.org or meta.get("client_org"),
                document,
                existing_update_id=args.update_id,
                status=args.status,
            )
        finally:
            await close_db()

    try:
        saved = asyncio.run(_run())
    except WeeklyPulseError as e:
        log.error("cmd_save_failed", error=str(e))
        return 1

    _print_json(saved.model_dump(mode="json", by_alias=True, exclude={"data"}))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print one weekly update as JSON."""
    from weekly_pulse.db.session import close_db
    from weekly_pulse.errors import WeeklyPulseError
    from weekly_pulse.services import create_update_store

    log = structlog.get_logger()
    store = create_update_store()

    async def _run():
        try:
            return await store.get_update_by_id(args.update_id)
        finally:
            await close_db()

    try:
        update = asyncio.run(_run())
    except WeeklyPulseError as e:
        log.error("cmd_show_failed", error=str(e))
        return 1

    if update is None:
        log.warning("update_not_found", id=args.update_id)
        return 1

    _print_json(update.model_dump(mode="json", by_alias=True))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Print a user's weekly update summaries, newest week first."""
    from weekly_pulse.db.session import close_db
    from weekly_pulse.errors import WeeklyPulseError
    from weekly_pulse.services import create_update_store

    log = structlog.get_logger()
    store = create_update_store()

    async def _run():
        try:
            return await store.list_updates_for_user(args.user)
        finally:
            await close_db()

    try:
        summaries = asyncio.run(_run())
    except WeeklyPulseError as e:
        log.error("cmd_list_failed", error=str(e))
        return 1

    _print_json([summary.model_dump(mode="json", by_alias=True) for summary in summaries])
    return 0


def cmd_references(args: argparse.Namespace) -> int:
    """Print all teams or all organizations, ordered by name."""
    from weekly_pulse.db.session import close_db
    from weekly_pulse.errors import WeeklyPulseError
    from weekly_pulse.services import create_update_store

    log = structlog.get_logger()
    store = create_update_store()

    async def _run():
        try:
            if args.command == "teams":
                return await store.list_teams()
            return await store.list_organizations()
        finally:
            await close_db()

    try:
        entries = asyncio.run(_run())
    except WeeklyPulseError as e:
        log.error("cmd_references_failed", kind=args.command, error=str(e))
        return 1

    _print_json([entry.model_dump(mode="json", by_alias=True) for entry in entries])
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="weekly_pulse",
        description="Weekly Pulse - weekly leadership update store",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db command
    subparsers.add_parser(
        "init-db",
        help="Create all tables in the configured database",
    )

    # template command
    subparsers.add_parser(
        "template",
        help="Print an empty weekly update document",
    )

    # save command
    save_parser = subparsers.add_parser(
        "save",
        help="Save a weekly update from a JSON document",
    )
    save_parser.add_argument("--user", required=True, help="Author user id")
    save_parser.add_argument("--file", required=True, help="Path to the JSON document")
    save_parser.add_argument(
        "--date",
        type=str,
        help="Week date (YYYY-MM-DD). Defaults to meta.date from the document.",
    )
    save_parser.add_argument("--team", help="Team name. Defaults to meta.team_name.")
    save_parser.add_argument("--org", help="Client organization. Defaults to meta.client_org.")
    save_parser.add_argument("--update-id", help="Edit this existing update")
    save_parser.add_argument("--status", help="Update status, e.g. draft or published")

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Print a weekly update as JSON",
    )
    show_parser.add_argument("update_id", help="Weekly update id")

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List a user's weekly updates",
    )
    list_parser.add_argument("--user", required=True, help="Author user id")

    # teams / orgs commands
    subparsers.add_parser("teams", help="List all teams")
    subparsers.add_parser("orgs", help="List all client organizations")

    return parser


def main() -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args()

    commands = {
        "init-db": cmd_init_db,
        "template": cmd_template,
        "save": cmd_save,
        "show": cmd_show,
        "list": cmd_list,
        "teams": cmd_references,
        "orgs": cmd_references,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
