"""Entry point for running null-annotator.

This module provides the command line interface:
- ``run``: infer annotations for the configured target and write the
  approved work list
- ``apply``: inject a previously written work list into a source tree
"""

import argparse
import asyncio
import sys
from pathlib import Path

import pydantic
import structlog

from null_annotator._version import __version__

log = structlog.get_logger()


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from null_annotator.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO

    configure_logging(
        level=level,
        log_format=LogFormat(log_format.lower()),
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="null-annotator",
        description="Infer and apply nullability annotations to a Java code base",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", help="Infer annotations and write the approved work list")
    run.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("annotator.yaml"),
        help="Path to configuration file (default: annotator.yaml)",
    )
    run.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without running",
    )

    apply = commands.add_parser("apply", help="Inject a work list into source files")
    apply.add_argument("work_list", type=Path, help="Work list JSON file")
    apply.add_argument(
        "--root",
        type=Path,
        default=Path("."),
        help="Directory relative work-list paths are resolved against (default: .)",
    )

    return parser.parse_args(argv)


async def run_annotator(config_path: Path, dry_run: bool = False) -> int:
    """Run the annotation engine.

    Args:
        config_path: Path to configuration file
        dry_run: If True, only validate config without running

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    log.info("starting_null_annotator", version=__version__, config_path=str(config_path))

    try:
        from null_annotator.config.loader import load_config

        log.info("loading_configuration", path=str(config_path))
        config = load_config(config_path)
        log.info("configuration_loaded")

        from null_annotator.utils.logging import configure_logging

        configure_logging(
            level=config.logging.level,
            log_format=config.logging.format,
            file_path=config.logging.file.path if config.logging.file.enabled else None,
            file_enabled=config.logging.file.enabled,
        )

        if dry_run:
            log.info("dry_run_mode_config_valid")
            return 0

        from null_annotator.core.annotator import create_annotator
        from null_annotator.utils.errors import AnnotatorError

        annotator = create_annotator(config)
        try:
            result = await annotator.run()
        except AnnotatorError as e:
            log.error("annotation_run_failed", error_type=type(e).__name__, error=str(e))
            return 1

        log.info(
            "work_list_written",
            path=str(config.output.path),
            items=len(result.work_list),
        )
        return 0

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(config_path), error=str(e))
        return 1
    except (ValueError, pydantic.ValidationError) as e:
        log.error("configuration_invalid", error=str(e))
        return 1


def apply_work_list(work_list: Path, root: Path) -> int:
    """Inject a work list.

    Args:
        work_list: Work list JSON file
        root: Directory relative paths are resolved against

    Returns:
        Exit code; 2 if some items could not be applied
    """
    from null_annotator.injector.injector import Injector
    from null_annotator.injector.worklist import load_work_list
    from null_annotator.utils.errors import ValidationError

    try:
        items = load_work_list(work_list)
        changes = [item.to_change() for item in items]
    except FileNotFoundError as e:
        log.error("work_list_not_found", path=str(work_list), error=str(e))
        return 1
    except (pydantic.ValidationError, ValidationError) as e:
        log.error("work_list_invalid", path=str(work_list), error=str(e))
        return 1

    result = Injector(root).apply(changes)
    return 2 if result.dropped else 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.format)

    if args.command == "apply":
        return apply_work_list(args.work_list, args.root)

    try:
        return asyncio.run(run_annotator(args.config, args.dry_run))
    except KeyboardInterrupt:
        log.info("interrupted_source_tree_restored")
        return 130


if __name__ == "__main__":
    sys.exit(main())
