"""Command line entry point.

Usage:
    dorexport export /goobi/metadata/1234 [--title mybook_1234] [--profile stanford]
    dorexport shard druid:bb018zb8894 [--destination /assembly]
    dorexport profiles
    dorexport settings
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from dorexport.core.config import config as app_config
from dorexport.core.logger import setup_logger
from dorexport.export.errors import ExportError
from dorexport.export.orchestrator import build_export_settings
from dorexport.export.profiles import list_profiles
from dorexport.export.sharding import resolve_shard_path
from dorexport.host.process import ProcessFolder, export_process

logger = setup_logger(__name__)


def _print_status(status: str, message: Optional[str]) -> None:
    print(f"[{status}] {message or ''}".rstrip())


def _command_export(args: argparse.Namespace) -> int:
    values = app_config.all()
    overrides = {
        "EXPORT_PROFILE": args.profile,
        "DESTINATION": args.destination,
        "API_BASE_URL": args.api_base_url,
        "DELAY": args.delay,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        settings = build_export_settings(values)
    except ExportError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    folder = ProcessFolder(Path(args.process_dir), title=args.title)
    outcome = export_process(folder, settings=settings, status_callback=_print_status)

    for problem in outcome.problems:
        print(problem, file=sys.stderr)
    return 0 if outcome.success else 1


def _command_shard(args: argparse.Namespace) -> int:
    destination = args.destination or app_config.get("DESTINATION", "/tmp")
    try:
        shard = resolve_shard_path(args.identifier, destination)
    except ExportError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(shard.root / "content")
    return 0


def _command_profiles(args: argparse.Namespace) -> int:
    for profile in list_profiles():
        print(f"{profile.name:<20} {profile.description}")
    return 0


def _command_settings(args: argparse.Namespace) -> int:
    import dorexport.config.settings  # noqa: F401
    from dorexport.core.settings_registry import get_all_settings_tabs, serialize_tab

    app_config.refresh()
    print(json.dumps([serialize_tab(tab) for tab in get_all_settings_tabs()], indent=2, default=str))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dorexport",
        description="Export digitized objects to the DOR assembly area and start the assembly workflow.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export a process folder")
    export_parser.add_argument("process_dir", help="Process folder containing images/, ocr/ and properties.json")
    export_parser.add_argument("--title", help="Process title (defaults to the folder name)")
    export_parser.add_argument("--profile", help="Export profile (see 'dorexport profiles')")
    export_parser.add_argument("--destination", help="Override the export root")
    export_parser.add_argument("--api-base-url", help="Override the workflow API URL")
    export_parser.add_argument("--delay", type=float, help="Seconds to wait before calling the workflow API")
    export_parser.set_defaults(func=_command_export)

    shard_parser = subparsers.add_parser("shard", help="Print the content folder for an object id")
    shard_parser.add_argument("identifier", help="Object id, e.g. druid:bb018zb8894")
    shard_parser.add_argument("--destination", help="Export root (defaults to the configured destination)")
    shard_parser.set_defaults(func=_command_shard)

    profiles_parser = subparsers.add_parser("profiles", help="List export profiles")
    profiles_parser.set_defaults(func=_command_profiles)

    settings_parser = subparsers.add_parser("settings", help="Show resolved settings")
    settings_parser.set_defaults(func=_command_settings)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
