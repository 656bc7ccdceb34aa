from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from portfolio_cms.client import PortfolioApi
from portfolio_cms.data.db import init_db, reset_engine
from portfolio_cms.workflows import RecordingNotifier

from fakes import API_URL, FakeServer


@pytest.fixture(autouse=True)
def local_store(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite local store so tests never touch the home directory."""
    db_path = tmp_path / "store.db"
    monkeypatch.setenv("PORTFOLIO_CMS_DB_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.delenv("PORTFOLIO_API_URL", raising=False)
    monkeypatch.delenv("PORTFOLIO_API_TIMEOUT", raising=False)
    reset_engine()
    init_db()
    yield
    # Dispose engine to release connections
    reset_engine()


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def api(server: FakeServer) -> PortfolioApi:
    return PortfolioApi(API_URL, transport=server.transport)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
