"""
`panelkit` command line: argument parsing and dispatch to the handlers in
`panelkit.cli.commands`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from panelkit import __version__


def create_parser() -> argparse.ArgumentParser:
    """Build the `panelkit` parser with its init, card, benchmark and snapshot subcommands."""
    parser = argparse.ArgumentParser(
        prog="panelkit",
        description="Derive renderable dashboard panel state from query results.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  panelkit init                              Initialize project configuration
  panelkit card result.json                  Show card state for a result
  panelkit card result.json --diff prev.json Show card state with change
  panelkit benchmark grouping.yaml           Show benchmark summary and tree
  panelkit snapshot strip dash.json -o out   Strip a snapshot for export

Run `panelkit <command> --help` for the options of each command.
""",
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"panelkit {__version__}",
    )

    # Global options
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: .panelkit/config.yaml)",
    )
    parser.add_argument(
        "--ui",
        choices=["plain", "rich", "auto"],
        default=None,
        help="Terminal output style; overrides ui.mode from the config (default: plain)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # init
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize project configuration",
        description="Create the project configuration file with default values.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing configuration",
    )

    # card
    card_parser = subparsers.add_parser(
        "card",
        help="Derive card state from a tabular result",
        description=(
            "Derive card state from a tabular result file (JSON/YAML with "
            "columns and rows, or CSV)."
        ),
    )
    card_parser.add_argument(
        "data",
        nargs="?",
        help="Result file; omit to derive state from properties alone",
    )
    card_parser.add_argument(
        "--diff",
        metavar="PATH",
        help="Prior result file; enables diff mode",
    )
    card_parser.add_argument(
        "--type",
        dest="card_type",
        choices=["alert", "info", "ok", "table"],
        default=None,
        help="Card display type",
    )
    card_parser.add_argument("--label", help="Fallback label")
    card_parser.add_argument("--value", help="Fallback value")
    card_parser.add_argument("--icon", help="Icon override")
    card_parser.add_argument("--href", help="Link target")
    card_parser.add_argument(
        "--status",
        choices=["initialized", "blocked", "running", "complete", "error"],
        default="complete",
        help="Run state of the panel (default: complete)",
    )
    card_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    # benchmark
    benchmark_parser = subparsers.add_parser(
        "benchmark",
        help="Summarize a benchmark grouping",
        description="Build summary cards and the result tree for a benchmark grouping file.",
    )
    benchmark_parser.add_argument(
        "grouping",
        help="Grouping file (YAML/JSON) with benchmark, grouping and dashboard keys",
    )
    benchmark_parser.add_argument(
        "--name",
        metavar="NAME",
        help="Panel name (default: benchmark name)",
    )
    benchmark_parser.add_argument(
        "--title",
        metavar="TITLE",
        help="Panel title (default: benchmark title)",
    )
    benchmark_parser.add_argument(
        "--expanded",
        action="store_true",
        help="Render as an expanded panel (no title block)",
    )
    benchmark_parser.add_argument(
        "--format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format (default: table)",
    )

    # snapshot
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Snapshot utilities",
        description="Prepare dashboard snapshots for sharing.",
    )
    snapshot_subparsers = snapshot_parser.add_subparsers(
        dest="snapshot_action",
        title="actions",
        metavar="<action>",
    )
    strip_parser = snapshot_subparsers.add_parser(
        "strip",
        help="Strip panel fields before export",
        description="Remove configured panel fields (snapshot.strip_fields) from a snapshot.",
    )
    strip_parser.add_argument("snapshot", help="Snapshot JSON file")
    strip_parser.add_argument(
        "-o", "--output",
        metavar="PATH",
        help="Write to file instead of stdout",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Args:
        argv: Arguments without the program name; defaults to sys.argv[1:].

    Returns:
        Process exit code: 0 on success, 1 on errors, 130 when interrupted.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    from panelkit.cli import commands

    try:
        if args.command == "init":
            return commands.cmd_init(args)

        elif args.command == "card":
            return commands.cmd_card(args)

        elif args.command == "benchmark":
            return commands.cmd_benchmark(args)

        elif args.command == "snapshot":
            if args.snapshot_action == "strip":
                return commands.cmd_snapshot_strip(args)
            else:
                parser.parse_args([args.command, "--help"])
                return 1

        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nAborted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
