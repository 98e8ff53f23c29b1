from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .calendar_view.controller import register as register_calendar
from .common.logging_config import setup_logging
from .common.web import register_error_handlers
from .container import build_container
from .export.controller import register as register_export
from .notifications.controller import register as register_notifications
from .requests.controller import register as register_requests
from .storage.bootstrap import apply_schema, list_tables
from .storage.kv_store import KeyValueStore
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None, *, store: Optional[KeyValueStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    storage_backend = getattr(settings, "STORAGE_BACKEND", "memory")
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("settings=%s storage=%s", settings_module, storage_backend)

    if store is None and storage_backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(storage_backend=storage_backend, db_config=db_config, store=store)
    app.extensions["attendance_portal"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_requests(app, container)
    register_notifications(app, container)
    register_export(app, container)
    register_calendar(app, container)

    return app
