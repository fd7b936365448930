from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_setup import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .container import build_container
from .activity.controller import register as register_activity
from .attendance.controller import register as register_attendance
from .attendance.faculty_controller import register as register_faculty
from .batch.controller import register as register_batch
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        log_file=getattr(settings, "LOG_FILE", None),
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("Demo seed ready")

    container = build_container(
        db_config=db_config,
        secret_key=app.secret_key,
        jwt_expiry_hours=int(getattr(settings, "JWT_EXPIRY_HOURS", 8)),
        otp_ttl_seconds=int(getattr(settings, "OTP_TTL_SECONDS", 300)),
        enforce_end_time_restriction=bool(getattr(settings, "ENFORCE_END_TIME_RESTRICTION", False)),
        activity_log_capacity=int(getattr(settings, "ACTIVITY_LOG_CAPACITY", 20)),
    )
    app.extensions["training_attendance"] = container

    register_users(app, container)
    register_attendance(app, container)
    register_faculty(app, container)
    register_batch(app, container)
    register_reports(app, container)
    register_activity(app, container)

    return app
