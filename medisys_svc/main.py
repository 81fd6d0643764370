"""
FastAPI application entry point for the MediSys patient service.

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware                                                 │
    │    └── LoggingMiddleware  - Request logging & request ids   │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health, /ready                      │
    │    └── patients.py   - Patient CRUD and search              │
    ├─────────────────────────────────────────────────────────────┤
    │  PatientService (services/)   ← Injected via Depends()      │
    ├─────────────────────────────────────────────────────────────┤
    │  PatientRepository (repositories/)                          │
    ├─────────────────────────────────────────────────────────────┤
    │  Database handle (SQLite)   ← opened/closed by lifespan     │
    └─────────────────────────────────────────────────────────────┘

Startup opens the single database handle and stores it on app.state.
Shutdown closes the handle exactly once. `python main.py` checks the
database before serving and exits with status 1 if it cannot be opened;
under an external `uvicorn main:app` the same failure aborts startup.
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, Settings, settings
from core.exceptions import DatabaseConnectionError, setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import health_router, patients_router
from repositories import Database

logger = logging.getLogger(__name__)


def open_database(config: Settings = settings) -> Database:
    """
    Create the database directory and open the handle.

    Raises:
        DatabaseConnectionError: The directory or the database file is unusable.
    """
    try:
        config.ensure_directories()
    except OSError as e:
        raise DatabaseConnectionError(
            detail=f"Cannot create database directory {config.medisys_db_dir}: {e}"
        ) from e

    db = Database(
        db_path=config.database_path,
        busy_timeout=config.medisys_db_busy_timeout
    )
    db.open()
    return db


def _log_startup_failure(error: DatabaseConnectionError, config: Settings = settings) -> None:
    logger.critical(
        f"Startup failed: {error.detail}. "
        f"Check MEDISYS_DB_DIR / MEDISYS_DB_FILE (currently {config.database_path})."
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database before serving and close it after the last request.

    Startup:
        - Configures logging
        - Opens the database handle (creates the schema on first run)

    Shutdown:
        - Closes the database handle
    """
    setup_logging()
    logger.info("Starting MediSys patient service...")

    try:
        db = open_database()
    except DatabaseConnectionError as e:
        _log_startup_failure(e)
        raise SystemExit(1) from e

    app.state.database = db
    logger.info("Database ready", extra={"db_path": db.db_path})

    try:
        yield
    finally:
        logger.info("MediSys patient service shutting down...")
        db.close()
        app.state.database = None


def create_app() -> FastAPI:
    """Build the application with handlers, middleware and routers."""
    application = FastAPI(
        title="MediSys Patient Service",
        description="Patient record management for a medical practice: admission, "
                    "search, update and guarded deletion of patient records.",
        version="1.0.0",
        lifespan=lifespan
    )

    setup_exception_handlers(application)
    application.add_middleware(LoggingMiddleware)

    application.include_router(health_router)
    application.include_router(patients_router)
    return application


app = create_app()


def run() -> None:
    """Command-line entry: verify the database is usable, then serve."""
    setup_logging()
    try:
        open_database().close()
    except DatabaseConnectionError as e:
        _log_startup_failure(e)
        sys.exit(1)

    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )


if __name__ == "__main__":
    run()
