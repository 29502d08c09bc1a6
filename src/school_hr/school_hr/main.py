from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .container import build_container
from .core.enums import ErrorKind
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .storage.kv_store import KeyValueStore
from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)

_CONFLICT_KINDS = {ErrorKind.ALREADY_POSTED, ErrorKind.INVALID_REQUEST_STATE, ErrorKind.BALANCE_LOCKED}


def status_for(error: DomainError) -> int:
    if error.kind == ErrorKind.NOT_FOUND:
        return 404
    if error.kind in _CONFLICT_KINDS:
        return 409
    return 400


def create_app(*, settings: Optional[Any] = None, store: Optional[KeyValueStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    if settings is None:
        settings = importlib.import_module(get_settings_module())
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    backend = str(getattr(settings, "STORE_BACKEND", "memory")).lower()
    if store is None and backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        db_config = getattr(settings, "DB_CONFIG")
        apply_schema(db_config, schema_path=getattr(settings, "SCHEMA_PATH", None))
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(settings=settings, store=store)
    app.extensions["school_hr"] = container
    logger.info("school-hr started: store=%s", "injected" if store is not None else backend)

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        return jsonify({"error": error.kind.value, "message": error.message}), status_for(error)

    register_employees(app, container)
    register_leave(app, container)
    register_attendance(app, container)
    register_payroll(app, container)

    return app
