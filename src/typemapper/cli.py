"""
Command-line interface for inspecting declared mappings.

Mappings are declared at import time, so ``typemapper describe`` imports the
given modules and prints every definition they added to the default registry.
"""

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from . import __version__
from .config import apply_log_level, configure_logging, load_settings
from .core.registry import MappingRegistry, get_default_registry, set_default_registry
from .exceptions import MappingError, SettingsLoadError


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="typemapper",
        description="Inspect mappings declared with typemapper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Describe the mappings declared by a module
  typemapper describe myapp.mappings

  # Apply settings before the modules are imported
  typemapper describe myapp.mappings --config typemapper.yaml

  # Machine-readable output
  typemapper describe myapp.mappings --json
        """,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    describe = subparsers.add_parser(
        "describe", help="Import modules and list the mappings they declare"
    )
    describe.add_argument(
        "modules",
        nargs="+",
        metavar="MODULE",
        help="Dotted module path declaring mappings (repeatable)",
    )
    describe.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Settings file (.yaml, .yml or .json) for the default registry",
    )
    describe.add_argument(
        "--json", action="store_true", help="Print definitions as JSON"
    )
    describe.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    describe.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (shows registry activity)",
    )

    return parser.parse_args(argv)


def format_definition(summary: dict[str, Any]) -> str:
    """Render one ``MappingDefinition.describe()`` summary as text."""
    header = f"{summary['source']} -> {summary['destination']}"
    if summary["identifier"]:
        header += f" ['{summary['identifier']}']"

    lines = [header]
    flags = [
        name
        for name, enabled in (
            ("custom constructor", summary["custom_constructor"]),
            ("before hook", summary["before_hook"]),
            ("after hook", summary["after_hook"]),
        )
        if enabled
    ]
    if flags:
        lines.append(f"    with {', '.join(flags)}")
    for step in summary["assignments"]:
        lines.append(f"    - {step}")
    for step in summary["projections"]:
        lines.append(f"    - {step}")
    return "\n".join(lines)


def run_describe(
    modules: Sequence[str],
    config: Optional[Path] = None,
    as_json: bool = False,
    debug: bool = False,
    verbose: bool = False,
) -> int:
    """
    Import ``modules`` and print the definitions of the default registry.

    Returns:
        The process exit code: 0 on success, 1 for settings errors, 2 when a
        module cannot be imported, 3 for mapping errors raised while importing.
    """
    # JSON goes to stdout, so keep log records out of it.
    configure_logging(debug, verbose, stream=sys.stderr if as_json else sys.stdout)
    logger = logging.getLogger(__name__)

    try:
        if config is not None:
            settings = load_settings(config)
            set_default_registry(MappingRegistry(settings))
            if not (debug or verbose):
                apply_log_level(settings)

        for module_name in modules:
            logger.info(f"Importing {module_name}")
            importlib.import_module(module_name)

    except SettingsLoadError as e:
        logger.error(f"Settings error: {e}")
        return 1
    except ImportError as e:
        logger.error(f"Cannot import module: {e}")
        return 2
    except MappingError as e:
        logger.error(f"Mapping configuration error: {e}")
        return 3

    summaries = get_default_registry().describe()

    if as_json:
        print(json.dumps(summaries, indent=2))
        return 0

    if not summaries:
        print("No mappings defined.")
        return 0

    print(f"{len(summaries)} mapping(s) defined:")
    for summary in summaries:
        print(format_definition(summary))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    if args.command == "describe":
        return run_describe(
            args.modules, args.config, args.json, args.debug, args.verbose
        )
    return 2  # pragma: no cover


if __name__ == "__main__":
    sys.exit(main())
