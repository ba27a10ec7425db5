from __future__ import annotations

import importlib
import logging
import sys

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_setup import configure_logging
from .container import build_container
from .core.exceptions import AuthError, DeliverySinkError
from .report.controller import register as register_report

logger = logging.getLogger(__name__)


def _load_settings():
    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(
        getattr(settings, "LOG_LEVEL", "INFO"),
        detailed=bool(getattr(settings, "SHOW_DETAILED_LOGS", False)),
    )
    logger.debug("settings=%s", settings_module)
    return settings


def create_app(settings=None) -> Flask:
    settings = settings or _load_settings()
    app = Flask(__name__)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    container = build_container(settings=settings)
    app.extensions["attendance_container"] = container

    if app.config["DEBUG"]:
        logger.info(
            "attendance-report: source=%s users=%d sinks=%s",
            container.source.kind.value,
            len(container.config.user_ids),
            ", ".join(type(s).__name__ for s in container.sinks),
        )

    register_report(app, container)
    return app


def run_once() -> int:
    """Build and deliver one report. Exit code 1 on auth/delivery failure."""
    settings = _load_settings()
    container = build_container(settings=settings)
    try:
        results = container.attendance_service.run()
    except (AuthError, DeliverySinkError) as e:
        logger.error("Attendance report run failed: %s", e)
        return 1
    logger.info("Attendance report run finished (%d deliveries)", len(results))
    return 0


if __name__ == "__main__":
    sys.exit(run_once())
