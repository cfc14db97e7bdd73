"""
Tests for the uvicorn entry point's startup checks.
"""

import importlib
import logging
import sys

import pytest

from leave_portal.core.config import get_settings


@pytest.fixture
def fresh_main(mock_env_vars, monkeypatch, tmp_path):
    """Import ``main`` from scratch with a clean settings cache and root logger."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delitem(sys.modules, "main", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    get_settings.cache_clear()

    yield lambda: importlib.import_module("main")

    get_settings.cache_clear()
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestStartup:
    def test_builds_app(self, fresh_main):
        module = fresh_main()
        assert module.app.title == "Leave Portal"

    def test_missing_secret_exits(self, fresh_main, monkeypatch):
        monkeypatch.delenv("LEAVE_JWT_SECRET_KEY")
        with pytest.raises(SystemExit) as exc_info:
            fresh_main()
        assert exc_info.value.code == 1

    def test_unreadable_seed_file_exits(self, fresh_main, monkeypatch, tmp_path):
        monkeypatch.setenv("LEAVE_SEED_FILE", str(tmp_path / "missing.json"))
        with pytest.raises(SystemExit) as exc_info:
            fresh_main()
        assert exc_info.value.code == 1
