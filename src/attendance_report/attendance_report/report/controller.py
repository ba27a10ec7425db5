from __future__ import annotations

import hmac
import logging
from datetime import date, datetime
from functools import wraps

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import AuthError, DeliverySinkError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def trigger_key_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            given = request.headers.get("X-Trigger-Key") or request.args.get("key") or ""
            expected = container.trigger_key or ""
            if not given or not expected or not hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8")):
                logger.warning("Trigger key check failed for %s", request.path)
                return jsonify({"error": "invalid trigger key"}), 401
            return view(*args, **kwargs)

        return wrapper

    def _parse_today(value: str | None) -> date | None:
        if not value:
            return None
        return datetime.strptime(value, "%Y-%m-%d").date()

    def _run(today: date | None = None):
        results = container.attendance_service.run(today=today)
        return [{"channel": r.channel, "ok": r.ok, "detail": r.detail} for r in results]

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"}), 200

    @app.route("/api/trigger", methods=["POST"], endpoint="trigger")
    @trigger_key_required
    def trigger():
        """Manual run."""
        logger.info("Manual attendance report trigger")
        try:
            today = _parse_today(request.args.get("today"))
        except ValueError:
            return jsonify({"error": "today must be YYYY-MM-DD"}), 400

        try:
            deliveries = _run(today)
        except (AuthError, DeliverySinkError) as e:
            logger.error("Manual trigger failed: %s", e)
            return jsonify({"error": str(e)}), 500
        return jsonify({"message": "attendance report sent", "deliveries": deliveries}), 200

    @app.route("/api/cron", methods=["GET"], endpoint="cron")
    def cron():
        """Entry point for an external scheduler (platform cron)."""
        logger.info("Scheduled attendance report run")
        try:
            deliveries = _run()
        except (AuthError, DeliverySinkError) as e:
            logger.error("Scheduled run failed: %s", e)
            return jsonify({"success": False, "error": str(e)}), 500
        return jsonify({"success": True, "deliveries": deliveries}), 200

    @app.route("/api/report/preview", methods=["GET"], endpoint="report_preview")
    @trigger_key_required
    def report_preview():
        try:
            today = _parse_today(request.args.get("today"))
        except ValueError:
            return jsonify({"error": "today must be YYYY-MM-DD"}), 400

        try:
            report = container.attendance_service.build_report(today=today, use_cache=False)
        except AuthError as e:
            return jsonify({"error": str(e)}), 500
        return jsonify(report.to_dict()), 200
