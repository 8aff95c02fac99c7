"""
Command-line entry point for contractfix.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .cli.commands import EXIT_ERROR, cmd_analyze, cmd_config, cmd_fix, cmd_rules
from .cli.rich_output import get_rich_output, set_rich_enabled
from .config import load_config
from .errors import ConfigurationError, ContractFixError

logger = logging.getLogger(__name__)

COMMANDS = {
    "analyze": cmd_analyze,
    "fix": cmd_fix,
    "rules": cmd_rules,
    "config": cmd_config,
}


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _add_rules_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rules",
        nargs="+",
        metavar="ID",
        help="Rule ids to run (default: the enabled rules from configuration)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="contractfix",
        description="contractfix - migrate code off the legacy contract library",
        epilog='Use "contractfix <command> --help" for detailed command help.',
    )

    # Global options
    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output and debug logging",
    )
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable rich terminal output (use plain text)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Report contract findings")
    analyze_parser.add_argument("path", help="File or directory to analyze")
    _add_rules_argument(analyze_parser)
    analyze_parser.add_argument(
        "--format", choices=["text", "json"], default="text", help="Output format"
    )
    analyze_parser.add_argument(
        "--fail-on-findings",
        action="store_true",
        help="Exit with status 1 when findings are reported",
    )

    fix_parser = subparsers.add_parser("fix", help="Fix contract findings")
    fix_parser.add_argument("path", help="File or directory to fix")
    _add_rules_argument(fix_parser)
    fix_parser.add_argument(
        "--write", action="store_true", help="Write changes instead of printing a diff"
    )
    fix_parser.add_argument(
        "--no-backup", action="store_true", help="Do not keep backups of changed files"
    )

    subparsers.add_parser("rules", help="List available rules")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_action", required=True)
    config_subparsers.add_parser("show", help="Show the effective configuration")
    init_parser = config_subparsers.add_parser("init", help="Write a default configuration file")
    init_parser.add_argument(
        "--output", "-o", default="contractfix.yaml", help="Configuration file to create"
    )
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    setup_logging(args.verbose)
    set_rich_enabled(not args.no_rich)

    try:
        config = load_config(args.config)
        return COMMANDS[args.command](args, config)
    except ConfigurationError as e:
        get_rich_output().print_error(f"Configuration error: {e}")
        return EXIT_ERROR
    except ContractFixError as e:
        get_rich_output().print_error(str(e))
        if args.verbose:
            logger.exception("Command failed")
        return EXIT_ERROR
    except KeyboardInterrupt:
        get_rich_output().print_error("Operation cancelled by user")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
