"""
Tests for the command-line interface and the preview scanner.
"""

import json
import logging
import pytest
from pathlib import Path


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestScanner:
    """Tests for scan_workspace."""

    def test_scan_json5(self, json5_home: Path):
        from openclaw_migrate.scanner import scan_workspace

        result = scan_workspace(json5_home)

        assert result.error is None
        assert result.has_config is True
        assert result.format == "json5"
        assert result.has_memory is True
        assert [a.id for a in result.agents] == ["coder", "researcher", "helper"]
        assert result.agents[0].provider == "deepseek"
        assert result.agents[0].tools == ["file_read", "shell_exec"]
        assert "google_chat" in result.channels
        assert "imessage" not in result.channels
        assert result.skills == ["calendar", "weather"]

    def test_scan_legacy(self, legacy_home: Path):
        from openclaw_migrate.scanner import scan_workspace

        result = scan_workspace(legacy_home)

        assert result.format == "legacy_yaml"
        assert [a.id for a in result.agents] == ["assistant", "ops"]
        assert result.channels == ["teams", "slack", "telegram"]
        assert result.skills == ["weather", "odd"]

    def test_scan_missing_directory(self, tmp_path: Path):
        from openclaw_migrate.scanner import scan_workspace

        result = scan_workspace(tmp_path / "nope")

        assert result.error.startswith("Directory not found")
        assert result.agents == []

    def test_scan_captures_parse_error(self, tmp_path: Path):
        from openclaw_migrate.scanner import scan_workspace

        (tmp_path / "openclaw.json").write_text("{ broken")
        result = scan_workspace(tmp_path)

        assert result.has_config is True
        assert result.error.startswith("Cannot parse openclaw.json")

    def test_to_dict_is_json_serializable(self, json5_home: Path):
        from openclaw_migrate.scanner import scan_workspace

        data = json.loads(json.dumps(scan_workspace(json5_home).to_dict()))

        assert data["path"] == str(json5_home)
        assert data["agents"][1]["model"] == "gemini-2.5-pro"


@pytest.mark.unit
class TestCli:
    """Tests for the argparse entry point."""

    def test_no_command_prints_help(self, capsys):
        from openclaw_migrate.cli import main

        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_scan_json(self, json5_home: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["scan", str(json5_home), "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["format"] == "json5"
        assert len(data["agents"]) == 3

    def test_scan_text(self, legacy_home: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["scan", str(legacy_home)]) == 0

        out = capsys.readouterr().out
        assert "Format: legacy_yaml" in out
        assert "assistant (Assistant)" in out

    def test_scan_missing_source(self, tmp_path: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["scan", str(tmp_path / "nope")]) == 1
        assert "Directory not found" in capsys.readouterr().out

    def test_migrate(self, json5_home: Path, target_dir: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["migrate", str(json5_home), "-t", str(target_dir)]) == 0

        out = capsys.readouterr().out
        assert "Migration complete" in out
        assert (target_dir / "config.toml").is_file()
        assert (target_dir / "migration_report.md").is_file()

    def test_migrate_dry_run_json(self, json5_home: Path, target_dir: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["migrate", str(json5_home), "-t", str(target_dir), "--dry-run", "--json"]) == 0

        out = capsys.readouterr().out
        data = json.loads(out[out.index("{"):])
        assert data["dry_run"] is True
        assert not target_dir.exists()

    def test_migrate_missing_source(self, tmp_path: Path, target_dir: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["migrate", str(tmp_path / "nope"), "-t", str(target_dir)]) == 1
        assert "Error: Source directory not found" in capsys.readouterr().out
        assert not target_dir.exists()

    def test_auto_detect_nothing_found(self, temp_home: Path, capsys):
        from openclaw_migrate.cli import main

        assert main(["scan"]) == 1
        assert "No OpenClaw installation found" in capsys.readouterr().out

    def test_log_file(self, json5_home: Path, tmp_path: Path):
        from openclaw_migrate.cli import main

        log_file = tmp_path / "logs" / "migrate.log"

        assert main(["-v", "--log-file", str(log_file), "scan", str(json5_home)]) == 0
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "Parsed openclaw.json" in log_file.read_text()
