from __future__ import annotations

import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Optional

import socketio
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.log import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .directory.controller import register as register_directory
from .realtime.events import register as register_socket_events
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _cors_origins(value):
    if value is None or value == "*":
        return "*"
    return [origin.strip() for origin in str(value).split(",") if origin.strip()]


def create_socket_server(settings: ModuleType) -> socketio.Server:
    return socketio.Server(
        async_mode="threading",
        cors_allowed_origins=_cors_origins(getattr(settings, "SOCKETIO_CORS_ORIGINS", "*")),
    )


def _prepare_database(settings: ModuleType, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        logger.info("Demo seed ready")


def create_app(*, container: Optional[Container] = None, settings: Optional[ModuleType] = None) -> Flask:
    """Build the Flask app with the Socket.IO server mounted in front of it.

    Pass `container` to run against other repositories (tests use in-memory ones).
    """

    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = settings or importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), log_file=getattr(settings, "LOG_FILE", None))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _prepare_database(settings, db_config)
        container = build_container(
            db_config=db_config,
            socket_server=create_socket_server(settings),
            proximity_mode=getattr(settings, "PROXIMITY_MODE", "fixed"),
            threshold_meters=float(getattr(settings, "PROXIMITY_THRESHOLD_METERS", 10.0)),
            max_slack_meters=getattr(settings, "PROXIMITY_MAX_SLACK_METERS", None),
            require_location=bool(getattr(settings, "REQUIRE_LOCATION", True)),
            lock_finished=bool(getattr(settings, "LOCK_FINISHED_SESSIONS", False)),
        )

    register_sessions(app, container)
    register_attendance(app, container)
    register_directory(app, container)
    register_socket_events(container.socket_server, container.attendance_service, container.notifier)

    if isinstance(container.socket_server, socketio.Server):
        app.wsgi_app = socketio.WSGIApp(container.socket_server, app.wsgi_app)

    app.extensions["qr_attendance"] = container
    return app
