"""
Health check web server.

The hosting platform polls this to decide whether the process is alive;
the bot itself never calls it.
"""

import logging
import threading

from flask import Flask

from verifybot import config

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    app = Flask(__name__)

    @app.route('/')
    @app.route('/healthz')
    def health():
        return config.HEALTH_RESPONSE, 200, {"Content-Type": "text/plain; charset=utf-8"}

    return app


def start_health_server(host: str = config.WEB_HOST, port: int = config.WEB_PORT) -> threading.Thread:
    """Run the health server in a daemon thread next to the bot."""
    app = create_app()
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "use_reloader": False},
        name="health-server",
        daemon=True,
    )
    thread.start()
    logger.info(f"Web server on {host}:{port}")
    return thread
