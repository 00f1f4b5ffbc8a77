"""
Centralized error handlers for Flask applications.
"""

from http import HTTPStatus

from flask import Flask, jsonify, session
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from comandas_shared.api_client import ApiError
from comandas_shared.error_catalog import describe_api_error
from comandas_shared.logging_config import get_logger
from comandas_shared.serializers import error_response
from comandas_shared.services.auth_service import AuthError
from comandas_shared.services.cart_service import CartError
from comandas_shared.services.order_workflow_service import WorkflowRefused, failure_status
from comandas_shared.validation import ValidationError

logger = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        """Handle custom validation errors."""
        logger.warning(f"Validation error: {e}")
        return jsonify(error_response(str(e))), HTTPStatus.BAD_REQUEST

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Pydantic validation error: {e}")
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in e.errors()
        ]
        return jsonify(
            error_response("Datos inválidos", {"details": details})
        ), HTTPStatus.BAD_REQUEST

    @app.errorhandler(CartError)
    def handle_cart_error(e: CartError):
        logger.warning(f"Cart error: {e}")
        return jsonify(error_response(str(e))), HTTPStatus.BAD_REQUEST

    @app.errorhandler(WorkflowRefused)
    def handle_workflow_refused(e: WorkflowRefused):
        logger.info(f"Action refused: {e.message}")
        return jsonify(error_response(e.message)), e.status

    @app.errorhandler(AuthError)
    def handle_auth_error(e: AuthError):
        logger.warning(f"Auth error: {e.message}")
        return jsonify(error_response(e.message)), e.status

    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        """Backend call failed outside a workflow that reports its own result."""
        if e.is_unauthorized:
            # Stored token was rejected; force a new login
            session.clear()
            logger.warning(f"Backend rejected token for {e.url}, session cleared")
            body = error_response(describe_api_error(e))
            body["relogin"] = True
            return jsonify(body), HTTPStatus.UNAUTHORIZED
        logger.warning(f"Backend error {e.status} on {e.url}: {e.message}")
        return jsonify(error_response(describe_api_error(e))), failure_status(e)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions from Werkzeug."""
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        return jsonify(error_response(e.description or str(e))), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle any unhandled exceptions."""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify(
            error_response("Error interno del servidor")
        ), HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(404)
    def handle_not_found(e):
        """Handle 404 errors."""
        return jsonify(error_response("Recurso no encontrado")), HTTPStatus.NOT_FOUND

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        """Handle 405 errors."""
        return jsonify(error_response("Método no permitido")), HTTPStatus.METHOD_NOT_ALLOWED
