"""
Flask application factory for the container monitor status API.
"""

import logging
import threading

from flask import Flask, g

from containermon.health.daemon import MonitorDaemon

logger = logging.getLogger(__name__)


def create_app(daemon: MonitorDaemon) -> Flask:
    """
    Create and configure Flask application.

    Args:
        daemon: Monitor daemon whose state is served

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    app.config["CONTAINERMON_DAEMON"] = daemon

    from containermon.web.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.before_request
    def before_request():
        """Expose the daemon to request handlers."""
        g.daemon = app.config["CONTAINERMON_DAEMON"]

    return app


def serve_in_background(
    daemon: MonitorDaemon,
    host: str = "0.0.0.0",
    port: int = 8080,
) -> threading.Thread:
    """
    Serve the status API from a daemon thread.

    Args:
        daemon: Monitor daemon whose state is served
        host: Address to bind
        port: Port to bind

    Returns:
        The started server thread
    """
    app = create_app(daemon)

    def _serve():
        app.run(host=host, port=port, debug=False, use_reloader=False)

    thread = threading.Thread(target=_serve, name="containermon-status", daemon=True)
    thread.start()
    logger.info(f"Status API listening on {host}:{port}")
    return thread
