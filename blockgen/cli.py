"""CLI entrypoints for blockgen commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, BlockgenConfig, ConfigError, load_config
from .coordinator import GenerationCoordinator
from .logging import configure_logging
from .models import GenerationReport
from .stores import JsonContentStore


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full generation report as JSON.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockgen",
        description="Generate WordPress block, symbol and SCSS partial files from component records.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-c",
        "--config",
        default=CONFIG_FILENAME,
        help=f"Path to the configuration file or its directory (defaults to ./{CONFIG_FILENAME}).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    regenerate_parser = subparsers.add_parser(
        "regenerate",
        help="Regenerate files for every record and prune orphaned outputs.",
    )
    _add_verbose_option(regenerate_parser, suppress_default=True)
    _add_json_option(regenerate_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate files for a single record.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_json_option(generate_parser)
    generate_parser.add_argument("record_id", type=int, help="Identifier of the record to generate.")

    status_parser = subparsers.add_parser(
        "status",
        help="Show which generated files exist for the given records.",
    )
    _add_verbose_option(status_parser, suppress_default=True)
    status_parser.add_argument("record_ids", type=int, nargs="+", help="Record identifiers.")

    stats_parser = subparsers.add_parser(
        "stats",
        help="Show how many blocks depend on shared partials and symbols.",
    )
    _add_verbose_option(stats_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for blockgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(verbose=bool(args.verbose), log_file=config.log_file)

    store_path = config.store_path
    if store_path is None:
        parser.exit(1, f"No record store configured; set store.path in {CONFIG_FILENAME}.\n")
    if not store_path.exists():
        parser.exit(1, f"Record store not found: {_relativize(store_path)}\n")

    store = JsonContentStore(store_path)
    try:
        coordinator = _build_coordinator(config, store)
    except ValueError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "regenerate":
        report = coordinator.regenerate_all_files()
        store.persist()
        _finish(parser, report, as_json=bool(args.json))
    elif args.command == "generate":
        try:
            report = coordinator.regenerate_record(args.record_id)
        except LookupError as exc:
            parser.exit(1, f"{exc.args[0]}\n")
        _finish(parser, report, as_json=bool(args.json))
    elif args.command == "status":
        print(json.dumps(coordinator.file_status(args.record_ids), indent=2))
    elif args.command == "stats":
        stats = coordinator.global_impact_stats()
        for key, value in stats.items():
            print(f"{key}: {value}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _build_coordinator(config: BlockgenConfig, store: JsonContentStore) -> GenerationCoordinator:
    return GenerationCoordinator.from_config(config, store)


def _finish(parser: argparse.ArgumentParser, report: GenerationReport, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(
            f"{report.succeeded} record(s) generated, {report.failed} failed; "
            f"{report.files_written} file(s) written, {report.files_removed} removed"
        )
    if not report.ok:
        details = [
            f"record {record.record_id} ({record.slug}): "
            + (record.error or "; ".join(a.error or "" for a in record.artifacts if not a.ok))
            for record in report.records
            if not record.ok
        ]
        details.extend(report.errors)
        parser.exit(1, "blockgen finished with errors:\n  " + "\n  ".join(details) + "\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
