"""Tests for `panelkit snapshot` and `panelkit init` CLI wiring."""

from __future__ import annotations

import json

from panelkit.cli import commands
from panelkit.cli.main import create_parser, main
from panelkit.config import Config


SNAPSHOT = {
    "layout": {"name": "dash"},
    "panels": {
        "dash.card.a": {"name": "dash.card.a", "sql": "select 1", "source_definition": "card {}"},
    },
}


def test_snapshot_strip_to_stdout(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(commands, "get_configured_config", lambda _args: Config(project_root=tmp_path))
    path = tmp_path / "dash.json"
    path.write_text(json.dumps(SNAPSHOT))

    args = create_parser().parse_args(["snapshot", "strip", str(path)])
    assert commands.cmd_snapshot_strip(args) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["panels"]["dash.card.a"] == {"name": "dash.card.a"}


def test_snapshot_strip_to_file_with_configured_fields(tmp_path, capsys, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("snapshot:\n  strip_fields: [sql]\n")
    monkeypatch.setattr(
        commands,
        "get_configured_config",
        lambda _args: Config(config_path=config_file, project_root=tmp_path),
    )
    path = tmp_path / "dash.json"
    path.write_text(json.dumps(SNAPSHOT))
    out_path = tmp_path / "export" / "dash.sps"

    args = create_parser().parse_args(["snapshot", "strip", str(path), "-o", str(out_path)])
    assert commands.cmd_snapshot_strip(args) == 0
    assert "written to" in capsys.readouterr().out
    panel = json.loads(out_path.read_text())["panels"]["dash.card.a"]
    assert "sql" not in panel
    assert panel["source_definition"] == "card {}"


def test_snapshot_strip_rejects_non_object(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(commands, "get_configured_config", lambda _args: Config(project_root=tmp_path))
    path = tmp_path / "dash.json"
    path.write_text("[1, 2]")
    args = create_parser().parse_args(["snapshot", "strip", str(path)])
    assert commands.cmd_snapshot_strip(args) == 1
    assert "Error:" in capsys.readouterr().out


def test_init_force_writes_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PANELKIT_CONFIG", raising=False)
    assert main(["init", "--force"]) == 0
    assert (tmp_path / ".panelkit" / "config.yaml").exists()
    assert "Configuration saved to" in capsys.readouterr().out


def test_init_existing_declined(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".panelkit").mkdir()
    (tmp_path / ".panelkit" / "config.yaml").write_text("ui:\n  mode: rich\n")
    monkeypatch.setattr("builtins.input", lambda _prompt: "n")
    assert main(["init"]) == 0
    assert "Aborted." in capsys.readouterr().out
    assert "rich" in (tmp_path / ".panelkit" / "config.yaml").read_text()


def test_main_without_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: panelkit" in capsys.readouterr().out
