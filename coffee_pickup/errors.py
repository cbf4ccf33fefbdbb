
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base for failures surfaced to the caller as ``{"error", "reason"}``."""

    status_code = 500
    reason = "dependency_failure"
    default_message = "Internal error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"error": self.message, "reason": self.reason}


class ValidationError(ServiceError):
    status_code = 400
    reason = "validation_error"
    default_message = "Invalid request"


class Unauthorized(ServiceError):
    status_code = 401
    reason = "unauthorized"
    default_message = "Invalid or expired token"


class Forbidden(ServiceError):
    status_code = 403
    reason = "forbidden"
    default_message = "Barista access only"


class NotFound(ServiceError):
    status_code = 404
    reason = "not_found"
    default_message = "Not found"


class CapacityExceeded(ServiceError):
    status_code = 409
    reason = "capacity_exceeded"
    default_message = "Pickup slot is full. Please choose another time."


class DependencyFailure(ServiceError):
    status_code = 500
    reason = "dependency_failure"


def register_error_handlers(app, db):
    @app.errorhandler(ServiceError)
    def handle_service_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(err):
        db.session.rollback()
        logger.exception("Store operation failed")
        failure = DependencyFailure(str(getattr(err, "orig", None) or err))
        return jsonify(failure.to_dict()), failure.status_code
