"""Tests for the logbook command line."""

import pytest
from click.testing import CliRunner

from src.cli.main import cli


class TestCli:
    """Test suite for begin/entry/end/status commands."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def config_file(self, tmp_path):
        """Config with log_dir inside the test directory."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "logbook:\n"
            f"  log_dir: {tmp_path / 'logs'}\n"
            "  echo: false\n"
        )
        return path

    @pytest.fixture
    def invoke(self, runner, config_file):
        def _invoke(*args):
            return runner.invoke(cli, ["--config", str(config_file), *args])
        return _invoke

    def test_begin_entry_end(self, invoke, tmp_path):
        """Test a full session driven from the command line."""
        log_file = tmp_path / "job.log"

        result = invoke("begin", str(log_file), "--script", "/opt/jobs/nightly.py")
        assert result.exit_code == 0, result.output
        assert str(log_file) in result.output

        result = invoke("entry", str(log_file), "disk low", "--category", "war")
        assert result.exit_code == 0, result.output

        result = invoke("end", str(log_file))
        assert result.exit_code == 0, result.output
        assert "Session ended after" in result.output

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines[1] == "Script fullname          : /opt/jobs/nightly.py"
        assert lines[9].endswith("; WAR; disk low")
        assert lines[12].startswith("End time                 : ")
        assert lines[13].startswith("Total duration (seconds) : ")

    def test_entry_default_category(self, invoke, tmp_path):
        """Test entries default to INF."""
        log_file = tmp_path / "job.log"
        invoke("begin", str(log_file))

        result = invoke("entry", str(log_file), "started")

        assert result.exit_code == 0, result.output
        assert log_file.read_text(encoding="utf-8").splitlines()[-1].endswith("; INF; started")

    def test_entry_echo(self, invoke, tmp_path):
        """Test --echo prints the entry line."""
        log_file = tmp_path / "job.log"
        invoke("begin", str(log_file))

        result = invoke("entry", str(log_file), "careful", "-c", "ERR", "--echo")

        assert result.exit_code == 0, result.output
        assert "; ERR; careful" in result.output

    def test_begin_default_path(self, invoke, tmp_path):
        """Test begin without a path creates a file in the configured log_dir."""
        result = invoke("begin")

        assert result.exit_code == 0, result.output
        created = list((tmp_path / "logs").glob("session_*.log"))
        assert len(created) == 1
        assert str(created[0]) in result.output

    def test_begin_invalid_path(self, invoke, tmp_path):
        """Test begin reports files that cannot be created."""
        result = invoke("begin", str(tmp_path / "missing" / "job.log"))

        assert result.exit_code == 1
        assert "Could not start session" in result.output

    def test_entry_missing_file(self, invoke, tmp_path):
        """Test entry without a started session fails."""
        result = invoke("entry", str(tmp_path / "nope.log"), "x")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_entry_invalid_category(self, invoke, tmp_path):
        """Test unknown categories are rejected by option parsing."""
        log_file = tmp_path / "job.log"
        invoke("begin", str(log_file))

        result = invoke("entry", str(log_file), "x", "--category", "DBG")

        assert result.exit_code == 2

    def test_end_without_header(self, invoke, tmp_path):
        """Test end on a file without header fails and writes nothing."""
        log_file = tmp_path / "job.log"
        log_file.write_text("no header\n", encoding="utf-8")

        result = invoke("end", str(log_file))

        assert result.exit_code == 1
        assert "cannot recover start date from header" in result.output
        assert log_file.read_text(encoding="utf-8") == "no header\n"

    def test_status(self, invoke, tmp_path):
        """Test status shows the start time and elapsed seconds."""
        log_file = tmp_path / "job.log"
        invoke("begin", str(log_file))

        result = invoke("status", str(log_file))

        assert result.exit_code == 0, result.output
        assert "Started:" in result.output
        assert "Elapsed:" in result.output

    def test_status_missing_file(self, invoke, tmp_path):
        """Test status on a missing file fails."""
        result = invoke("status", str(tmp_path / "nope.log"))

        assert result.exit_code == 1
        assert "Status check failed" in result.output

    def test_end_twice(self, invoke, tmp_path):
        """Test a second end on a finished session fails without a second footer."""
        log_file = tmp_path / "job.log"
        invoke("begin", str(log_file))
        assert invoke("end", str(log_file)).exit_code == 0

        result = invoke("end", str(log_file))

        assert result.exit_code == 1
        assert "not open" in result.output
        assert log_file.read_text(encoding="utf-8").count("End time") == 1

    def test_entry_after_end(self, invoke, tmp_path):
        """Test entries are rejected once the footer is written."""
        log_file = tmp_path / "job.log"
        invoke("begin", str(log_file))
        invoke("end", str(log_file))

        result = invoke("entry", str(log_file), "too late")

        assert result.exit_code == 1
        assert "too late" not in log_file.read_text(encoding="utf-8")
