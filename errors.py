# errors.py: error taxonomy shared by the managers and the HTTP layer

from flask import jsonify
from sqlalchemy.exc import DBAPIError

from database import db
from config import get_logger

logger = get_logger(__name__)


class TravelError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TravelError):
    status_code = 400
    default_message = "Missing required fields"


class Unauthenticated(TravelError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(TravelError):
    status_code = 403
    default_message = "Access denied"


class NotFound(TravelError):
    status_code = 404
    default_message = "Not found"


class Conflict(TravelError):
    status_code = 409
    default_message = "Conflict"


class StoreUnavailable(TravelError):
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(TravelError)
    def handle_travel_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(DBAPIError)
    def handle_store_error(error):
        # The request's transaction is unusable after a driver error
        db.session.rollback()
        logger.exception("Data store error")
        return handle_travel_error(StoreUnavailable())

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal Server Error: {error}")
        return jsonify({"error": "Server error"}), 500
