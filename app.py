"""
QuoteDesk - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (.env + config classes)
2. Opens the data store (JSON file, or memory when DATA_DIR is empty)
3. Creates the services and stores them in app.config
4. Registers route blueprints
5. Sets up JSON error handlers

ARCHITECTURE:
    Main Thread
    ├── Flask request handling (one user, one current draft)
    └── Cleanup on shutdown (pending draft written)

    Autosave Thread (short-lived timer)
    └── Writes the draft after the user stops editing
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from logging_config import setup_logging, get_logger
from core.exceptions import QuoteDeskError
from services import (
    BackupService,
    CatalogService,
    ClientService,
    DraftAutosaver,
    JsonStore,
    QuoteService,
    SettingsService,
    defaults_from_config,
)
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In PyInstaller bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent


def create_app(
    config_object: str = "config.Config",
    overrides: Optional[Dict[str, Any]] = None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path of the config class
        overrides: Config values applied after the config class (tests)

    Returns:
        Configured Flask application

    Raises:
        StorageError: If the data file exists but cannot be read
    """
    # Load .env from base path (next to executable in production)
    base_path = _get_base_path()
    env_file = base_path / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    # Create Flask app
    app = Flask(__name__)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting QuoteDesk in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # STORAGE
    # =========================================================================

    data_dir = app.config.get("DATA_DIR")
    data_path = Path(data_dir) / app.config["DATA_FILE_NAME"] if data_dir else None
    store = JsonStore(data_path)
    app.config["STORE"] = store

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    settings_service = SettingsService(store, defaults_from_config(app.config))
    catalog_service = CatalogService(store)
    client_service = ClientService(store)
    autosaver = DraftAutosaver(store, delay_seconds=app.config["AUTOSAVE_DELAY_SECONDS"])
    quote_service = QuoteService(
        store,
        catalog_service,
        client_service,
        settings_service,
        autosaver,
    )

    app.config["SETTINGS_SERVICE"] = settings_service
    app.config["CATALOG_SERVICE"] = catalog_service
    app.config["CLIENT_SERVICE"] = client_service
    app.config["BACKUP_SERVICE"] = BackupService(store)
    app.config["AUTOSAVER"] = autosaver
    app.config["QUOTE_SERVICE"] = quote_service

    # Pick up the draft left by the previous session
    if quote_service.load_draft() is not None:
        logger.info("Restored draft from previous session")

    logger.info("Services initialized")

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    def cleanup():
        """Cleanup on application shutdown."""
        logger.info("Shutting down...")
        try:
            autosaver.shutdown()
        except QuoteDeskError as e:
            logger.error(f"Could not write pending draft: {e}")
        logger.info("Shutdown complete")

    atexit.register(cleanup)

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(QuoteDeskError)
    def handle_quote_desk_error(e: QuoteDeskError):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e}")
        else:
            logger.warning(f"{type(e).__name__}: {e}")
        return e.to_dict(), e.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        max_mb = app.config.get("MAX_CONTENT_LENGTH", 8 * 1024 * 1024) / (1024 * 1024)
        return {"error": f"Request too large. Maximum size is {max_mb:.0f} MB.", "details": {}}, 413

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return {"error": e.description, "details": {}}, e.code

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return {"error": "An unexpected error occurred. Please try again.", "details": {}}, 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
