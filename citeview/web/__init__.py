"""Flask application exposing the CiteView REST API."""
import logging
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..citeview import CiteView
from ..config import Config
from ..exceptions import OracleError, RateLimitError, ValidationError
from .routes import api_bp

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None, service: Optional[CiteView] = None) -> Flask:
    """Build the Flask app.

    Args:
        config: Configuration (loaded from the environment if omitted)
        service: Pre-built CiteView (tests pass one with a fake provider)

    Returns:
        Flask application
    """
    if config is None:
        config = service.config if service is not None else Config.from_env()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_mb * 1024 * 1024
    app.config["CITEVIEW_SETTINGS"] = config
    app.config["CITEVIEW"] = service or CiteView(config=config)

    app.register_blueprint(api_bp, url_prefix="/api")
    _register_error_handlers(app, config)
    return app


def _register_error_handlers(app: Flask, config: Config) -> None:

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"success": False, "error": str(e)}), 400

    @app.errorhandler(RateLimitError)
    def handle_rate_limit(e):
        logger.warning(f"Rate limited on {request.method} {request.path}: {e}")
        return jsonify({"success": False, "error": str(e)}), 429

    @app.errorhandler(OracleError)
    def handle_oracle_error(e):
        logger.error(f"Service error on {request.method} {request.path}: {e}")
        return jsonify({"success": False, "error": str(e)}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        message = "Internal server error" if config.production else str(e)
        return jsonify({"success": False, "error": message}), 500
