# ==============================================================================
# Tests for CLI Commands
# ==============================================================================
"""
Tests for the clicksignals CLI.

Verifies that:
- Every command exits with code 0 on --help and lists its options
- config show renders both human-readable and JSON output
- replay runs a recording end to end and reports a summary

These tests use the real app from clicksignals.app so the full command
tree is wired up and Typer can introspect every command signature.
"""

import json
from unittest.mock import MagicMock

from typer.testing import CliRunner

from clicksignals.app import app
from clicksignals.infrastructure import MemorySessionStore

runner = CliRunner()

RECORDING = "\n".join(
    [
        '{"kind": "load", "timestamp": 0, "url": "https://shop.example/", "title": "Home"}',
        '{"kind": "click", "timestamp": 100, "x": 5, "y": 5, "target": "a.more"}',
        '{"kind": "click", "timestamp": 200, "x": 5, "y": 5, "target": "a.more"}',
        '{"kind": "click", "timestamp": 300, "x": 5, "y": 5, "target": "a.more"}',
        '{"kind": "unload", "timestamp": 2000}',
    ]
)


# ==============================================================================
# Help
# ==============================================================================


class TestHelp:
    """Tests for --help output."""

    def test_root_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Behavioral telemetry" in result.output
        for cmd in ["config", "replay"]:
            assert cmd in result.output, f"Missing command: {cmd}"

    def test_config_help(self):
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0
        assert "show" in result.output

    def test_replay_help(self):
        result = runner.invoke(app, ["replay", "--help"])
        assert result.exit_code == 0
        for option in ["--sink", "--store", "--json"]:
            assert option in result.output, f"Missing option: {option}"


# ==============================================================================
# config show
# ==============================================================================


class TestConfigShow:
    """Tests for `clicksignals config show`."""

    def test_human_readable(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Configuration" in result.output
        assert "Rage click" in result.output

    def test_json(self):
        result = runner.invoke(app, ["config", "show", "--json"])
        assert result.exit_code == 0
        config = json.loads(result.stdout)
        assert config["session"]["idle_timeout_ms"] > 0
        assert config["frustration"]["rage_min_clicks"] > 0
        assert "signals_topic" in config["kafka"]


# ==============================================================================
# replay
# ==============================================================================


class TestReplay:
    """Tests for `clicksignals replay`."""

    def test_memory_sink_json_summary(self, tmp_path):
        path = tmp_path / "session.jsonl"
        path.write_text(RECORDING)

        result = runner.invoke(
            app, ["replay", str(path), "--sink", "memory", "--store", "memory", "--json"]
        )
        assert result.exit_code == 0, result.output
        summary = json.loads(result.stdout)
        assert summary["records"] == 5
        assert summary["by_type"]["frustration"] == 1
        assert summary["failed"] == 0
        assert [b["kind"] for b in summary["beacons"]] == ["pageview"]
        assert summary["beacons"][0]["payload"]["timeOnPage"] == 2

    def test_human_readable_summary(self, tmp_path):
        path = tmp_path / "session.jsonl"
        path.write_text(RECORDING)

        result = runner.invoke(app, ["replay", str(path), "--sink", "memory"])
        assert result.exit_code == 0, result.output
        assert "Delivered" in result.output
        assert "rage_click" in result.output

    def test_session_store_closed(self, tmp_path, monkeypatch):
        path = tmp_path / "session.jsonl"
        path.write_text(RECORDING)
        store = MagicMock(wraps=MemorySessionStore())
        monkeypatch.setattr(
            "clicksignals.cli.replay.get_session_store", lambda name, settings: store
        )

        result = runner.invoke(app, ["replay", str(path), "--sink", "memory", "--json"])
        assert result.exit_code == 0, result.output
        store.close.assert_called_once()

    def test_invalid_recording(self, tmp_path):
        path = tmp_path / "broken.jsonl"
        path.write_text('{"kind": "load"}\nnot json\n')

        result = runner.invoke(app, ["replay", str(path), "--sink", "memory"])
        assert result.exit_code == 1
        assert "line 2" in result.output

    def test_unknown_sink(self, tmp_path):
        path = tmp_path / "session.jsonl"
        path.write_text(RECORDING)

        result = runner.invoke(app, ["replay", str(path), "--sink", "smoke-signals"])
        assert result.exit_code == 1
        assert "Unknown sink" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["replay", str(tmp_path / "absent.jsonl")])
        assert result.exit_code != 0
