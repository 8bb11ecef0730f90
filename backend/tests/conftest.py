"""Shared fixtures: every test gets fresh settings pointed at its own tmp dir."""

import pytest

from versioner.core.settings import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point VERSIONS_DIR at tmp_path and drop any cached Settings."""
    monkeypatch.setenv("VERSIONS_DIR", str(tmp_path))
    monkeypatch.delenv("UNPARSED_POLICY", raising=False)
    monkeypatch.delenv("DEFAULT_SEPARATOR", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_files(tmp_path):
    """Create empty files (or folders, for names ending in '/') under tmp_path."""
    def _make(*names):
        for name in names:
            if name.endswith("/"):
                (tmp_path / name.rstrip("/")).mkdir()
            else:
                (tmp_path / name).write_text("x", encoding="utf-8")
        return tmp_path
    return _make
