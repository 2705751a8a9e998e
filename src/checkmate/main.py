from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema
from .geo.controller import register as register_geo
from .notifications.controller import register as register_notifications
from .settings import get_settings_module

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

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
        container = build_container(settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn, str(db_config["database"]))

    app.extensions["checkmate"] = container

    register_attendance(app, container)
    register_geo(app, container)
    register_notifications(app, container)

    return app
