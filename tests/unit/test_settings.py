"""Tests for settings and engine URL resolution."""

import pytest

from backend.docstore.config import Settings
from backend.docstore.db.engine import resolve_database_url
from backend.docstore.search.factory import build_search_index
from backend.docstore.search.instrumented import InstrumentedSearchIndex


def test_settings_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.search_backend == "sql"
    assert settings.search_index_timeout_ms == 2000
    assert settings.sql_echo is False


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEARCH_BACKEND", "http")
    monkeypatch.setenv("SEARCH_INDEX_URL", "http://index.internal:9000")
    monkeypatch.setenv("SEARCH_INDEX_TIMEOUT_MS", "750")

    settings = Settings(_env_file=None)

    assert settings.search_backend == "http"
    assert settings.search_index_url == "http://index.internal:9000"
    assert settings.search_index_timeout_ms == 750


def test_resolve_database_url_rewrites_sync_drivers() -> None:
    pg = Settings(_env_file=None, database_url="postgresql://u:p@db:5432/docs")
    lite = Settings(_env_file=None, database_url="sqlite:///./docs.db")
    already_async = Settings(_env_file=None, database_url="sqlite+aiosqlite:///./docs.db")

    assert resolve_database_url(pg) == "postgresql+asyncpg://u:p@db:5432/docs"
    assert resolve_database_url(lite) == "sqlite+aiosqlite:///./docs.db"
    assert resolve_database_url(already_async) == "sqlite+aiosqlite:///./docs.db"


def test_resolve_database_url_rejects_placeholder(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("POSTGRES_URL", raising=False)

    with pytest.raises(ValueError, match="DATABASE_URL"):
        resolve_database_url(Settings(_env_file=None))


def test_build_search_index_wraps_selected_backend() -> None:
    settings = Settings(_env_file=None, search_backend="http", search_index_url="http://idx")

    index = build_search_index(settings, session=None)  # type: ignore[arg-type]

    assert isinstance(index, InstrumentedSearchIndex)
