"""Flask entry points for the exchange rate monitor."""

import atexit
import io
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, send_file
from werkzeug.exceptions import HTTPException

from .config import Config
from .exporter import build_workbook, export_filename
from .services import RateMonitor
from .table_view import render_page

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def create_app(monitor: Optional[RateMonitor] = None, start_monitor: bool = True) -> Flask:
    """Build the Flask app around a single :class:`RateMonitor`."""

    app = Flask(__name__)
    rate_monitor = monitor or RateMonitor()
    app.extensions["rate_monitor"] = rate_monitor

    if start_monitor:
        rate_monitor.start()
        atexit.register(rate_monitor.stop)

    @app.route("/")
    def index():
        return render_page(
            rate_monitor.state,
            poll_interval_seconds=rate_monitor.interval_seconds,
            source_url=Config.FUBON_RATE_URL,
        )

    @app.route("/api/rates")
    def get_rates():
        return jsonify(rate_monitor.state.to_dict())

    @app.route("/api/rates/refresh", methods=["POST"])
    def refresh_rates():
        accepted = rate_monitor.trigger()
        logger.info("POST /api/rates/refresh - accepted=%s", accepted)
        return jsonify({"accepted": accepted, "status": rate_monitor.state.status.value}), 202

    @app.route("/export")
    def export_rates():
        state = rate_monitor.state
        content = build_workbook(state.result)
        if content is None:
            return Response(status=204)

        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=export_filename(),
        )

    @app.route("/health")
    def health():
        state = rate_monitor.state
        return jsonify(
            {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                "monitor_status": state.status.value,
                "poll_interval_seconds": rate_monitor.interval_seconds,
                "api_key_configured": Config.has_credentials(),
            }
        )

    @app.errorhandler(Exception)
    def handle_unexpected(exc):  # pragma: no cover - defensive guard
        if isinstance(exc, HTTPException):
            return exc
        logger.error("Unexpected error while serving request", exc_info=True)
        return jsonify({"error": "Internal server error", "details": str(exc)}), 500

    return app


def run() -> None:
    logging.basicConfig(
        level=logging.DEBUG if Config.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = create_app()

    print("=" * 72)
    print(f"{Config.BANK_NAME} FX Rate Monitor - Local Server")
    print("=" * 72)
    print("\n📡 Available endpoints:")
    print("  GET  http://localhost:5000/")
    print("  GET  http://localhost:5000/api/rates")
    print("  POST http://localhost:5000/api/rates/refresh")
    print("  GET  http://localhost:5000/export")
    print("  GET  http://localhost:5000/health")
    print(f"\n⏱  Refresh interval: {app.extensions['rate_monitor'].interval_seconds}s")
    print("\n" + "=" * 72 + "\n")

    # The reloader would start a second monitor in the child process.
    app.run(debug=Config.DEBUG, use_reloader=False, host="0.0.0.0", port=5000)


if __name__ == "__main__":
    run()
