from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import ensure_kv_table
from .tracking.controller import register as register_tracking

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    backend = str(getattr(settings, "STORAGE_BACKEND", "file")).lower()
    logger.info("settings=%s storage=%s", settings_module, backend)

    if container is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            db_config = getattr(settings, "DB_CONFIG")
            ensure_kv_table(db_config)
            logger.info(
                "kv table ready on %s@%s:%s/%s",
                db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
            )
        container = build_container(settings)

    app.extensions["geo_attendance"] = container
    register_tracking(app, container)

    return app
