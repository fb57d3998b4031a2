"""
Integration tests for the jsondb entry point.
"""

import io
import json
import logging
import tempfile
from pathlib import Path

import json_log_formatter
import pytest

from jsondb.config import Settings
from jsondb.main import main, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestMain:
    """Tests for main()."""

    def test_missing_database_exits_nonzero(self, capsys):
        """A start-up database that cannot be loaded is fatal."""
        with tempfile.TemporaryDirectory() as tmpdir:
            status = main(["--database", str(Path(tmpdir) / "nope")])

        assert status == 1
        assert "does not exist" in capsys.readouterr().err

    def test_runs_shell_on_loaded_database(self, monkeypatch, capsys):
        """--database loads before the first command."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.setattr(
                "sys.stdin", io.StringIO('create users\ninsert users {"a": 1}\nquit\n')
            )

            status = main(["--database", tmpdir])

            data = json.loads((Path(tmpdir) / "users.json").read_text())

        out = capsys.readouterr().out
        assert status == 0
        assert f" ({tmpdir})> " in out
        assert data["entries"][0]["doc"] == {"a": 1}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_text_format(self):
        """Text format installs a plain formatter at the configured level."""
        setup_logging(Settings(log_level="debug", log_format="text"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_json_format(self):
        """JSON format uses JSONFormatter."""
        setup_logging(Settings(log_format="json"))

        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_unknown_level_falls_back(self):
        """Unknown level names fall back to WARNING."""
        setup_logging(Settings(log_level="chatty"))

        assert logging.getLogger().level == logging.WARNING
