"""Shared test fixtures."""

from pathlib import Path

import pytest

from talkorithm.store.chat_store import ChatStore


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("talkorithm.config.settings.turso_database_url", "")


@pytest.fixture
def chat_store(tmp_path: Path, _no_turso) -> ChatStore:
    """Create a ChatStore backed by a temp database."""
    return ChatStore(db_path=tmp_path / "test.db")
