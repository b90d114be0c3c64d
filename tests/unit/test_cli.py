"""Tests for Syntra CLI commands."""

import csv
import io
import json
import logging
import re

import pytest
import structlog
from click.testing import CliRunner

from syntra_cli.main import cli


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach log handlers bound to the runner's streams after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    structlog.reset_defaults()


@pytest.fixture
def storage_dir(tmp_path):
    """Create an isolated history directory."""
    return str(tmp_path / "history")


@pytest.fixture
def key_file(runner, tmp_path):
    """Generate a key bundle file."""
    path = tmp_path / "key.json"
    result = runner.invoke(cli, ["keygen", "--out", str(path)])
    assert result.exit_code == 0
    return str(path)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_version(self, runner):
        """Test version command."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_help(self, runner):
        """Test help command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Syntra CLI" in result.output
        assert "classify" in result.output
        assert "history" in result.output


class TestClassifyAndCoach:
    """Test classification and coaching commands."""

    def test_classify_table(self, runner):
        """Test classify prints the emotion."""
        result = runner.invoke(cli, ["classify", "I am so happy and excited today"])
        assert result.exit_code == 0
        assert "happy" in result.output

    def test_classify_json(self, runner):
        """Test classify JSON output."""
        result = runner.invoke(cli, ["-o", "json", "classify", "nothing to see here"])
        assert result.exit_code == 0
        assert '"emotion": "neutral"' in result.output

    def test_coach_detects_emotion(self, runner):
        """Test coach scores with the detected emotion."""
        result = runner.invoke(cli, ["-o", "json", "coach", "I am so happy and excited today"])
        assert result.exit_code == 0
        assert '"score": 95' in result.output
        assert '"band": "excellent"' in result.output

    def test_coach_explicit_emotion(self, runner):
        """Test coach with an explicit emotion."""
        result = runner.invoke(cli, ["coach", "I hate waiting around", "--emotion", "angry"])
        assert result.exit_code == 0
        assert "Practice calming techniques" in result.output

    def test_coach_rejects_unknown_emotion(self, runner):
        """Test emotion choices are enforced."""
        result = runner.invoke(cli, ["coach", "hi", "--emotion", "bewildered"])
        assert result.exit_code != 0


class TestKeygen:
    """Test key generation."""

    def test_keygen_stdout(self, runner):
        """Test the bundle is printed without --out."""
        result = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0
        bundle = json.loads(result.output)
        assert len(bundle["encryptionKey"]) == 64
        assert bundle["version"] == "1.0"

    def test_keygen_file(self, key_file):
        """Test the bundle file is valid JSON."""
        with open(key_file) as f:
            assert set(json.load(f)) == {"encryptionKey", "timestamp", "version"}


class TestHistoryCommands:
    """Test history commands."""

    def _add(self, runner, storage_dir, text, *extra):
        return runner.invoke(cli, ["--storage-dir", storage_dir, *extra, "history", "add", text,
                                   "--speaker", "alice", "--to", "es"])

    def test_add_and_search(self, runner, storage_dir):
        """Test recorded entries are searchable."""
        assert self._add(runner, storage_dir, "I am so happy and excited today").exit_code == 0
        assert self._add(runner, storage_dir, "This is terrible news").exit_code == 0

        result = runner.invoke(cli, ["--storage-dir", storage_dir, "-o", "json",
                                     "history", "search", "--emotion", "sad"])
        assert result.exit_code == 0
        assert "terrible" in result.output
        assert "excited" not in result.output

    def test_search_redacts(self, runner, storage_dir):
        """Test --redact masks keywords in output."""
        self._add(runner, storage_dir, "my code is 4321")

        result = runner.invoke(cli, ["--storage-dir", storage_dir, "-o", "json",
                                     "history", "search", "--redact", "4321"])
        assert result.exit_code == 0
        assert "4321" not in result.output
        assert "****" in result.output

    def test_export_csv(self, runner, storage_dir, tmp_path):
        """Test CSV export writes the filtered rows."""
        self._add(runner, storage_dir, "I am so happy")
        self._add(runner, storage_dir, "plain words here")
        out = tmp_path / "export.csv"

        result = runner.invoke(cli, ["--storage-dir", storage_dir, "history", "export", str(out),
                                     "--emotion", "happy"])
        assert result.exit_code == 0

        rows = list(csv.reader(io.StringIO(out.read_text(encoding="utf-8"))))
        assert rows[0][0] == "Timestamp"
        assert len(rows) == 2
        assert rows[1][2] == "I am so happy"

    def test_encrypted_history_requires_key(self, runner, storage_dir, key_file, tmp_path):
        """Test encrypted history cannot be read without the key."""
        assert self._add(runner, storage_dir, "secret plans", "--key-file", key_file).exit_code == 0

        stored = (tmp_path / "history" / "syntra_conversation_history.json").read_text()
        assert "secret plans" not in stored

        locked = runner.invoke(cli, ["--storage-dir", storage_dir, "history", "search"])
        assert locked.exit_code == 1
        assert "encrypted" in locked.output

        unlocked = runner.invoke(cli, ["--storage-dir", storage_dir, "--key-file", key_file,
                                       "-o", "json", "history", "search"])
        assert unlocked.exit_code == 0
        assert "secret plans" in unlocked.output

    def test_invalid_key_file(self, runner, storage_dir, tmp_path):
        """Test a malformed key bundle is rejected."""
        bad = tmp_path / "bad.json"
        bad.write_text("{}")

        result = runner.invoke(cli, ["--storage-dir", storage_dir, "--key-file", str(bad),
                                     "history", "search"])
        assert result.exit_code != 0
        assert "Invalid key file" in result.output

    def test_delete_and_clear(self, runner, storage_dir):
        """Test deleting one entry and clearing the rest."""
        self._add(runner, storage_dir, "first")
        self._add(runner, storage_dir, "second")

        listed = runner.invoke(cli, ["--storage-dir", storage_dir, "-o", "json", "history", "search"])
        entry_id = re.search(r'"id": "([0-9a-f]{32})"', listed.output).group(1)

        deleted = runner.invoke(cli, ["--storage-dir", storage_dir, "history", "delete", entry_id])
        assert deleted.exit_code == 0

        missing = runner.invoke(cli, ["--storage-dir", storage_dir, "history", "delete", entry_id])
        assert missing.exit_code == 1

        cleared = runner.invoke(cli, ["--storage-dir", storage_dir, "history", "clear", "--yes"])
        assert cleared.exit_code == 0
        assert "Cleared 1 entries" in cleared.output

    def test_stats(self, runner, storage_dir):
        """Test statistics output."""
        self._add(runner, storage_dir, "I am so happy")
        self._add(runner, storage_dir, "so happy and great")

        result = runner.invoke(cli, ["--storage-dir", storage_dir, "-o", "json", "history", "stats"])
        assert result.exit_code == 0
        assert '"dominant_emotion": "happy"' in result.output
        assert '"total_entries": 2' in result.output
