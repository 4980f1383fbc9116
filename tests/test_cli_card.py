"""Tests for `panelkit card` CLI wiring."""

from __future__ import annotations

import json

import pytest

from panelkit.cli import commands
from panelkit.cli.main import create_parser, main
from panelkit.config import Config


@pytest.fixture(autouse=True)
def _project_config(monkeypatch, tmp_path):
    monkeypatch.setattr(
        commands,
        "get_configured_config",
        lambda _args: Config(project_root=tmp_path),
    )


def _write_result(path, name, value, data_type="INT8"):
    path.write_text(json.dumps({
        "columns": [{"name": name, "data_type": data_type}],
        "rows": [{name: value}],
    }))
    return path


def test_card_parser_defaults():
    """Parser should default to complete status and table output."""
    args = create_parser().parse_args(["card", "result.json"])
    assert args.command == "card"
    assert args.data == "result.json"
    assert args.status == "complete"
    assert args.format == "table"
    assert args.diff is None


def test_cmd_card_json_with_diff(tmp_path, capsys):
    """JSON output carries the derived state and diff."""
    current = _write_result(tmp_path / "current.json", "Buckets", 101)
    prior = _write_result(tmp_path / "prior.json", "Buckets", 100)

    args = create_parser().parse_args(
        ["card", str(current), "--diff", str(prior), "--type", "info", "--format", "json"]
    )
    exit_code = commands.cmd_card(args)
    data = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert data["label"] == "Buckets"
    assert data["value"] == "101"
    assert data["value_number"] == 101
    assert data["type"] == "info"
    assert data["diff"] == {"direction": "up", "value": 1, "value_percent": 1}


def test_cmd_card_without_data_uses_properties(capsys):
    """No data file: state comes from the given properties."""
    args = create_parser().parse_args(
        ["card", "--value", "42", "--label", "Answer", "--status", "running", "--format", "json"]
    )
    assert commands.cmd_card(args) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["loading"] is True
    assert data["value"] == "42"
    assert data["value_number"] == 42
    assert "diff" not in data


def test_cmd_card_csv_input(tmp_path, capsys):
    """CSV results are read through pandas as formal results."""
    csv_path = tmp_path / "card.csv"
    csv_path.write_text("label,value\nRevenue,1234567\n")
    args = create_parser().parse_args(["card", str(csv_path), "--format", "json"])
    assert commands.cmd_card(args) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["label"] == "Revenue"
    assert data["value"] == "1,234,567"


def test_cmd_card_table_output(tmp_path, capsys):
    current = _write_result(tmp_path / "current.json", "Users", 1500)
    args = create_parser().parse_args(["--ui", "plain", "card", str(current)])
    assert commands.cmd_card(args) == 0
    out = capsys.readouterr().out
    assert "Card: Users" in out
    assert "1,500" in out


def test_cmd_card_missing_file(tmp_path, capsys):
    args = create_parser().parse_args(["card", str(tmp_path / "missing.json")])
    assert commands.cmd_card(args) == 1
    assert "Error: File not found" in capsys.readouterr().out


def test_cmd_card_invalid_result(tmp_path, capsys):
    """Malformed results are reported, not raised."""
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"columns": [{"data_type": "INT8"}], "rows": []}))
    args = create_parser().parse_args(["card", str(bad)])
    assert commands.cmd_card(args) == 1
    assert "Error:" in capsys.readouterr().out


def test_parse_cli_value():
    assert commands.parse_cli_value("42") == 42
    assert commands.parse_cli_value("4.5") == 4.5
    assert commands.parse_cli_value("abc") == "abc"
    assert commands.parse_cli_value(None) is None


def test_main_routes_card(tmp_path, capsys):
    current = _write_result(tmp_path / "current.json", "Total", 7)
    assert main(["card", str(current), "--format", "json"]) == 0
    assert json.loads(capsys.readouterr().out)["value_number"] == 7
