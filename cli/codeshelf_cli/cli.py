"""CLI entry point for the ``codeshelf`` command."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .client import ApiClient, ApiError

_LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Codeshelf project store client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List projects, most recently updated first")

    create_parser = subparsers.add_parser("create", help="Create a project from a template")
    create_parser.add_argument("--template", required=True, help="Template id")
    create_parser.add_argument("--name", default=None, help="Project name")

    import_parser = subparsers.add_parser("import", help="Import a zip archive")
    import_parser.add_argument("archive", type=Path, help="Path to the zip archive")

    export_parser = subparsers.add_parser("export", help="Export a project as zip")
    export_parser.add_argument("project_id")
    export_parser.add_argument(
        "--output", type=Path, required=True, help="Destination zip file"
    )

    for command in ("undo", "redo"):
        history_parser = subparsers.add_parser(
            command, help=f"{command.title()} the last change of a project"
        )
        history_parser.add_argument("project_id")

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)",
    )

    parser.add_argument(
        "--api-url",
        dest="api_url",
        default=None,
        help="Override the API base URL",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure root logger for console output."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s - %(message)s",
    )


def handle_list(client: ApiClient) -> int:
    for project in client.list_projects():
        print(
            f"{project['id']}  {project['name']}  "
            f"[{project['framework']}] snapshot {project['snapshot_index']}"
        )
    return 0


def handle_import(client: ApiClient, archive: Path) -> int:
    if not archive.is_file():
        _LOGGER.error("Archive not found: %s", archive)
        return 1
    project = client.import_archive(archive)
    print(project["id"])
    return 0


def handle_export(client: ApiClient, project_id: str, output: Path) -> int:
    data = client.export_project(project_id)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    _LOGGER.info("Wrote %d bytes to %s", len(data), output)
    return 0


def handle_history(client: ApiClient, command: str, project_id: str) -> int:
    result = client.undo(project_id) if command == "undo" else client.redo(project_id)
    if not result["changed"]:
        _LOGGER.warning("Nothing to %s for project %s", command, project_id)
    print(result["snapshot_index"])
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``codeshelf`` CLI."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    _LOGGER.debug("CLI arguments: %s", args)

    client = ApiClient(base_url=args.api_url)
    try:
        if args.command == "list":
            return handle_list(client)
        if args.command == "create":
            project = client.create_project(args.template, args.name)
            print(project["id"])
            return 0
        if args.command == "import":
            return handle_import(client, args.archive)
        if args.command == "export":
            return handle_export(client, args.project_id, args.output)
        if args.command in ("undo", "redo"):
            return handle_history(client, args.command, args.project_id)
    except ApiError as exc:
        _LOGGER.error("Request failed: %s", exc)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
