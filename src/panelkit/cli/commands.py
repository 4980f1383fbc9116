"""
Command handlers for panelkit CLI.

This module contains the implementation of each CLI command.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import yaml

from panelkit.benchmark import (
    BenchmarkView,
    ErrorView,
    GroupingContext,
    PanelDefinition,
    TableView,
    render_benchmark,
)
from panelkit.cards import DATA_MODE_DIFF, CardProperties, build_card_state
from panelkit.cli.ui import (
    UIResolutionError,
    build_benchmark_report,
    build_card_report,
    build_table_section,
    create_ui_backend,
    render_benchmark_report,
    render_card_report,
    resolve_ui_context,
    summary_card_rows,
)
from panelkit.config import Config, default_config_path, get_config, init_config
from panelkit.snapshot import strip_snapshot_for_export
from panelkit.tabular import TabularResult


# =============================================================================
# Helper Functions
# =============================================================================

def prompt_yes_no(message: str) -> bool:
    """Prompt user for yes/no confirmation."""
    answer = input(message).strip().lower()
    return answer in ("y", "yes")


def get_configured_config(args: Any) -> Config:
    """Get Config instance with CLI overrides."""
    config_path = getattr(args, "config", None)
    return get_config(config_path=config_path, reload=True)


def load_structured_file(path: Path) -> Any:
    """
    Load a JSON or YAML document.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r") as f:
        try:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ValueError(f"Could not parse {path}: {exc}") from exc


def load_tabular_result(path: Path) -> TabularResult:
    """Load a tabular result from CSV (via pandas) or a JSON/YAML columns+rows document."""
    if path.suffix.lower() == ".csv":
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return TabularResult.from_dataframe(pd.read_csv(path))
    return TabularResult.from_dict(load_structured_file(path))


def parse_cli_value(raw: Optional[str]) -> Any:
    """Interpret a --value argument as int, then float, else keep the string."""
    if raw is None:
        return None
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw


def _resolve_backend(args: Any, config: Config):
    ui_context = resolve_ui_context(args, config)
    return create_ui_backend(ui_context)


# =============================================================================
# init Command
# =============================================================================

def cmd_init(args: Any) -> int:
    """Initialize project configuration."""
    config_path = default_config_path()

    overwrite = bool(getattr(args, "force", False))
    if config_path.exists() and not overwrite:
        print(f"Configuration file already exists: {config_path}")
        if not prompt_yes_no("Overwrite? [y/N]: "):
            print("Aborted.")
            return 0
        overwrite = True

    written = init_config(project_root=Path.cwd(), overwrite=overwrite)
    print(f"Configuration saved to: {written}")
    print("You can edit this file to customize settings.")
    return 0


# =============================================================================
# card Command
# =============================================================================

def cmd_card(args: Any) -> int:
    """Derive and show card state for a tabular result."""
    try:
        config = get_configured_config(args)
        data = load_tabular_result(Path(args.data)) if args.data else None
        diff_data = load_tabular_result(Path(args.diff)) if args.diff else None
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    properties = CardProperties(
        label=args.label,
        value=parse_cli_value(args.value),
        icon=args.icon,
        href=args.href,
        data_mode=DATA_MODE_DIFF if diff_data is not None else None,
        diff_data=diff_data,
    )
    state = build_card_state(data, args.card_type, properties, args.status)

    if args.format == "json":
        print(json.dumps(state.to_dict(), indent=2, default=str))
        return 0

    try:
        backend = _resolve_backend(args, config)
    except UIResolutionError as exc:
        print(f"Error: {exc}")
        return 1

    render_card_report(build_card_report(state), backend)
    return 0


# =============================================================================
# benchmark Command
# =============================================================================

def cmd_benchmark(args: Any) -> int:
    """Summarize a benchmark grouping file."""
    try:
        config = get_configured_config(args)
        card_width = config.get_summary_card_width()
        payload = load_structured_file(Path(args.grouping))
        context = GroupingContext.from_dict(payload or {})
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    if args.name or args.title:
        context.definition = PanelDefinition(
            name=args.name or context.definition.name,
            title=args.title or context.definition.title,
            width=context.definition.width,
        )

    view = render_benchmark(
        context,
        expanded=args.expanded,
        card_width=card_width,
    )

    if view is None:
        print("Nothing to render: benchmark or grouping is missing.")
        return 0

    if isinstance(view, ErrorView):
        print(f"Error: {view.error}")
        return 1

    if args.format == "json":
        print(json.dumps(view.to_dict(), indent=2, default=str))
        return 0

    if args.format == "csv":
        if isinstance(view, TableView):
            df = view.data.to_dataframe() if view.data is not None else pd.DataFrame()
        else:
            df = pd.DataFrame(summary_card_rows(view))
        print(df.to_csv(index=False), end="")
        return 0

    try:
        backend = _resolve_backend(args, config)
    except UIResolutionError as exc:
        print(f"Error: {exc}")
        return 1

    if isinstance(view, TableView):
        backend.title(view.name)
        backend.table(build_table_section("Results:", view.data))
        return 0

    if isinstance(view, BenchmarkView):
        render_benchmark_report(build_benchmark_report(view), backend)
    return 0


# =============================================================================
# snapshot Commands
# =============================================================================

def cmd_snapshot_strip(args: Any) -> int:
    """Strip configured panel fields from a snapshot."""
    try:
        config = get_configured_config(args)
        snapshot = load_structured_file(Path(args.snapshot))
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    if not isinstance(snapshot, dict):
        print(f"Error: Snapshot must be a JSON object: {args.snapshot}")
        return 1

    strip_fields = config.get_strip_fields()
    stripped = strip_snapshot_for_export(snapshot, strip_fields)

    text = json.dumps(stripped)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text)
        print(f"Stripped snapshot written to: {output_path}")
    else:
        print(text)
    return 0
