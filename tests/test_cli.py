"""Tests for the typer front end."""

import json

import pytest
from typer.testing import CliRunner

from pycats.config import loader
from pycats.events import store as store_mod
from pycats.main import app

from conftest import write_numbered

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_global_config(monkeypatch, tmp_path):
    monkeypatch.setattr(loader, "user_config_dir", lambda app: str(tmp_path / "global"))


def test_tools_lists_builtins(workdir):
    result = runner.invoke(app, ["--cwd", str(workdir), "tools"])
    assert result.exit_code == 0
    assert "replace_text" in result.output
    assert "scroll_down" in result.output


def test_schema(workdir):
    result = runner.invoke(app, ["--cwd", str(workdir), "schema", "goto"])
    assert result.exit_code == 0
    schema = json.loads(result.output)
    assert schema["name"] == "goto"
    assert schema["parameters"][0]["name"] == "line_number"


def test_schema_openai(workdir):
    result = runner.invoke(app, ["--cwd", str(workdir), "schema", "open", "--openai"])
    assert result.exit_code == 0
    tools = json.loads(result.output)
    assert [t["function"]["name"] for t in tools] == ["open"]


def test_schema_unknown(workdir):
    result = runner.invoke(app, ["--cwd", str(workdir), "schema", "frobnicate"])
    assert result.exit_code == 1


def test_run_json(workdir):
    write_numbered(workdir / "a.txt", 200)
    result = runner.invoke(app, ["--cwd", str(workdir), "run", "--json", "open", "a.txt", "--line_number=120"])
    assert result.exit_code == 0, result.output
    out = json.loads(result.output)
    assert out["status"] == "success"
    assert out["data"]["window"]["start"] <= 120 <= out["data"]["window"]["end"]


def test_run_failure_exit_code(workdir):
    result = runner.invoke(app, ["--cwd", str(workdir), "run", "--json", "run_command", "rm -rf /"])
    assert result.exit_code == 1
    assert json.loads(result.output)["error_kind"] == "CommandRejected"


def test_batch_keeps_state(workdir, tmp_path):
    write_numbered(workdir / "a.txt", 300)
    script = tmp_path / "calls.jsonl"
    script.write_text(
        "\n".join([
            json.dumps({"tool": "open", "args": {"path": "a.txt"}}),
            json.dumps({"tool": "goto", "args": [300]}),
            json.dumps({"tool": "_state"}),
        ])
    )
    result = runner.invoke(app, ["--cwd", str(workdir), "batch", "--json", str(script)])
    assert result.exit_code == 0, result.output
    lines = [json.loads(line) for line in result.output.splitlines() if line.strip()]
    assert [r["status"] for r in lines] == ["success"] * 3
    assert lines[2]["data"]["window"] == {"start": 251, "end": 300, "size": 50}


def test_batch_reports_failures(workdir, tmp_path):
    script = tmp_path / "calls.jsonl"
    script.write_text(json.dumps({"tool": "goto", "args": [1]}) + "\n")
    result = runner.invoke(app, ["--cwd", str(workdir), "batch", str(script)])
    assert result.exit_code == 1


def test_bad_config_is_a_usage_error(workdir, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"window_size": -1}))
    result = runner.invoke(app, ["--cwd", str(workdir), "--config", str(bad), "tools"])
    assert result.exit_code == 2


def test_events_recorded_and_shown(workdir, tmp_path, monkeypatch):
    monkeypatch.setattr(store_mod, "events_dir", lambda: tmp_path / "ev")
    script = tmp_path / "calls.jsonl"
    script.write_text(json.dumps({"tool": "_state"}) + "\n" + json.dumps({"tool": "nope"}) + "\n")
    result = runner.invoke(app, ["--cwd", str(workdir), "--events", "--session", "abc", "batch", "--json", str(script)])
    assert result.exit_code == 1
    assert (tmp_path / "ev" / "abc.jsonl").exists()

    result = runner.invoke(app, ["events", "--session", "abc", "--type", "tool.result"])
    assert result.exit_code == 0, result.output
    assert "events: 2" in result.output
    assert "UnknownTool" in result.output
