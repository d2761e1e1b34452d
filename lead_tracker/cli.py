"""Command line interface for importing leads, reporting funnel stats, and syncing."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .assistant import GeminiGenerator, LeadAssistant
from .config import AppConfig, ConfigurationError, load_app_config
from .errors import LeadTrackerError
from .ingestion.exporters import export_leads
from .library import JsonLibrary
from .models import SheetStats, Workspace
from .session import LeadSession
from .sheets import APPS_SCRIPT_TEMPLATE


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Import lead spreadsheets, report pipeline statistics, and sync edits back to Google Sheets",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a configuration file (YAML or JSON); defaults to $LEAD_TRACKER_CONFIG",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    source_help = "Google Sheets URL, path to a CSV/TSV/XLSX file, or '-' to read CSV from stdin"

    stats = subparsers.add_parser("stats", help="Print funnel statistics for a lead source")
    stats.add_argument("source", help=source_help)
    stats.add_argument("--json", action="store_true", help="Emit the statistics as JSON")
    stats.set_defaults(handler=_cmd_stats)

    export = subparsers.add_parser("export", help="Write leads with their pipeline columns to CSV or Excel")
    export.add_argument("source", help=source_help)
    export.add_argument("output", help="Destination path (.csv, .tsv, .xlsx)")
    export.set_defaults(handler=_cmd_export)

    sync = subparsers.add_parser("sync", help="Push every lead to a Google Apps Script write-back endpoint")
    sync.add_argument("source", help=source_help)
    sync.add_argument("--sync-url", default=None, help="Apps Script web app URL (overrides the configuration)")
    sync.add_argument(
        "--confirm",
        action="store_true",
        help="Inspect the HTTP status instead of treating every dispatched request as delivered",
    )
    sync.set_defaults(handler=_cmd_sync)

    sync_script = subparsers.add_parser(
        "sync-script",
        help="Print the Google Apps Script web app that receives pushed leads",
    )
    sync_script.set_defaults(handler=_cmd_sync_script)

    assist = subparsers.add_parser("assist", help="Draft a cold email or an approach summary for one lead with Gemini")
    assist.add_argument("source", help=source_help)
    assist.add_argument("--row", type=int, default=1, help="1-based lead position in the source (default: 1)")
    assist.add_argument(
        "--analyze",
        action="store_true",
        help="Summarise how to approach the lead instead of drafting an email",
    )
    assist.set_defaults(handler=_cmd_assist)

    library = subparsers.add_parser("library", help="Manage saved Google Sheets")
    library_commands = library.add_subparsers(dest="library_command", required=True)
    library_list = library_commands.add_parser("list", help="List saved sheets")
    library_list.set_defaults(handler=_cmd_library_list)
    library_remove = library_commands.add_parser("remove", help="Remove a saved sheet")
    library_remove.add_argument("item_id", help="Identifier shown by 'library list'")
    library_remove.set_defaults(handler=_cmd_library_remove)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_session(config: AppConfig) -> LeadSession:
    library = JsonLibrary(config.library_path) if config.library_path else None
    return LeadSession(
        user_id=config.user_id,
        library=library,
        fetch_options=config.fetch_options(),
        push_options=config.push_options(),
    )


def open_source(session: LeadSession, source: str, *, sync_url: Optional[str] = None) -> Workspace:
    """Import ``source`` into the session and return the new active workspace.

    Only ``http://`` and ``https://`` sources are fetched as Google Sheets;
    anything else other than ``-`` is read as a local file.
    """

    if source == "-":
        return session.import_from_text(sys.stdin.read(), "stdin")
    if source.startswith(("http://", "https://")):
        return session.import_from_url(source, sync_url=sync_url)
    return session.import_from_file(source)


def format_stats(stats: SheetStats) -> str:
    lines = [
        f"Total leads:     {stats.total}",
        f"Contacted:       {stats.contacted}",
        f"Not responded:   {stats.not_responded}",
        f"Responded:       {stats.responded}",
        f"Won:             {stats.won}",
        f"Lost:            {stats.lost}",
        f"Contact rate:    {stats.contact_rate:.1f}%",
        f"Response rate:   {stats.response_rate:.1f}%",
        f"Conversion rate: {stats.conversion_rate:.1f}%",
    ]
    return "\n".join(lines)


def _cmd_stats(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    workspace = open_source(session, args.source)
    stats = session.stats()
    if args.json:
        print(json.dumps(stats.as_dict(), indent=2))
    else:
        print(f"{workspace.name} ({workspace.import_source.value})")
        print(format_stats(stats))
    return 0


def _cmd_export(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    workspace = open_source(session, args.source)
    destination = export_leads(workspace.leads, args.output)
    logging.info("Exported %s leads to %s", len(workspace.leads), Path(destination).resolve())
    return 0


def _cmd_sync(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    sync_url = args.sync_url or config.sync_url
    if not sync_url:
        logging.error("No sync URL given; pass --sync-url or set sync_url in the configuration")
        return 2
    if args.confirm:
        config.confirm_delivery = True
        session = build_session(config)

    workspace = open_source(session, args.source, sync_url=sync_url)
    workspace.sync_url = sync_url
    failures = 0
    for lead in list(workspace.leads):
        result = session.update_lead(lead)
        if result is not None and not result.ok:
            failures += 1
            logging.warning("Could not sync %s", lead.display_name())
    logging.info("Pushed %s leads (%s failed)", len(workspace.leads) - failures, failures)
    return 1 if failures else 0


def _cmd_sync_script(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    print(APPS_SCRIPT_TEMPLATE)
    return 0


def _cmd_assist(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    workspace = open_source(session, args.source)
    if not 1 <= args.row <= len(workspace.leads):
        logging.error("Row %s is out of range (1-%s)", args.row, len(workspace.leads))
        return 2
    lead = workspace.leads[args.row - 1]
    logging.info("Asking Gemini about %s", lead.display_name())
    try:
        assistant = LeadAssistant(GeminiGenerator(model=config.gemini_model))
    except ImportError as exc:
        logging.error("%s", exc)
        return 1
    print(assistant.analyze(lead) if args.analyze else assistant.draft_cold_email(lead))
    return 0


def _cmd_library_list(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    items = session.list_library()
    if not items:
        print("No saved sheets.")
        return 0
    for item in items:
        print(f"{item.id}\t{item.name}\t{item.url or ''}\t{item.created_at}")
    return 0


def _cmd_library_remove(args: argparse.Namespace, session: LeadSession, config: AppConfig) -> int:
    if not config.library_path:
        logging.error("No library configured; set library_path in the configuration")
        return 2
    session.remove_from_library(args.item_id)
    logging.info("Removed %s from the library", args.item_id)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_app_config(args.config)
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.INFO)
        logging.error("%s", exc)
        return 2

    level_name = (args.log_level or config.log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO))

    try:
        session = build_session(config)
        return args.handler(args, session, config)
    except (LeadTrackerError, ConfigurationError, FileNotFoundError, ValueError) as exc:
        logging.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
