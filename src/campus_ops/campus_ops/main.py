from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import build_container
from .gatekeeper.controller import register as register_gatekeeper
from .schedules.controller import register as register_schedules

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")

    container = build_container(
        db_config=db_config,
        timezone=getattr(settings, "TIMEZONE", None),
        deny_unscheduled=bool(getattr(settings, "GATE_DENY_UNSCHEDULED", False)),
        barcode_prefix=getattr(settings, "BARCODE_PREFIX", "EDW"),
        currency_label=getattr(settings, "CURRENCY_LABEL", "PKR"),
    )
    app.extensions["campus_ops"] = container

    register_gatekeeper(app, container)
    register_schedules(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
