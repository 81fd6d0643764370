"""
Tests for application startup and shutdown.

An unusable database location must stop the service with the CRITICAL
startup message instead of serving requests that can only fail.
"""
import asyncio

import pytest
from fastapi import FastAPI

import main
from core.config import Settings
from core.exceptions import DatabaseConnectionError


@pytest.fixture
def quiet_logging(monkeypatch):
    """Keep startup from reconfiguring the root logger during tests."""
    monkeypatch.setattr(main, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def blocked_dir(tmp_path):
    """A database directory path below a regular file, which can never be created."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    return str(blocker / "data")


@pytest.fixture
def served(monkeypatch):
    """Record uvicorn.run calls instead of starting a server."""
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    return calls


def run_lifespan(app: FastAPI, inside=None) -> None:
    async def _run():
        async with main.lifespan(app):
            if inside is not None:
                inside(app)
    asyncio.run(_run())


# =============================================================================
# open_database
# =============================================================================

def test_open_database_creates_directory(tmp_path):
    config = Settings(medisys_db_dir=str(tmp_path / "nested" / "data"), medisys_db_file="test.db")

    db = main.open_database(config)
    try:
        assert db.is_open
        assert (tmp_path / "nested" / "data" / "test.db").exists()
    finally:
        db.close()


def test_open_database_unusable_directory(blocked_dir):
    config = Settings(medisys_db_dir=blocked_dir)

    with pytest.raises(DatabaseConnectionError) as exc_info:
        main.open_database(config)
    assert "Cannot create database directory" in exc_info.value.detail


# =============================================================================
# LIFESPAN
# =============================================================================

def test_lifespan_opens_and_closes_database(tmp_path, monkeypatch, quiet_logging):
    monkeypatch.setattr(main.settings, "medisys_db_dir", str(tmp_path))
    seen = []

    app = FastAPI()
    run_lifespan(app, inside=lambda a: seen.append(a.state.database))

    assert seen[0] is not None
    assert not seen[0].is_open
    assert app.state.database is None


def test_lifespan_exits_with_status_1(blocked_dir, monkeypatch, quiet_logging, caplog):
    monkeypatch.setattr(main.settings, "medisys_db_dir", blocked_dir)

    with pytest.raises(SystemExit) as exc_info:
        run_lifespan(FastAPI())

    assert exc_info.value.code == 1
    assert any(record.levelname == "CRITICAL" for record in caplog.records)


# =============================================================================
# COMMAND-LINE ENTRY
# =============================================================================

def test_run_exits_with_status_1_without_serving(blocked_dir, monkeypatch, quiet_logging, served, caplog):
    monkeypatch.setattr(main.settings, "medisys_db_dir", blocked_dir)

    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    assert served == []
    assert any("Startup failed" in record.getMessage() for record in caplog.records)


def test_run_serves_when_database_is_usable(tmp_path, monkeypatch, quiet_logging, served):
    monkeypatch.setattr(main.settings, "medisys_db_dir", str(tmp_path))

    main.run()

    assert len(served) == 1
    assert served[0][0] == ("main:app",)
