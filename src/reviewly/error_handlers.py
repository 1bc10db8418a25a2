"""
Centralized error handlers for the Flask application.

Routes map their own expected failures; these handlers are the net for
everything that escapes a view. Every answer is JSON.
"""

from http import HTTPStatus

from flask import Flask, jsonify
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from reviewly.auth.service import AuthError
from reviewly.errors import ServiceError
from reviewly.logging_config import get_logger
from reviewly.schemas import schema_error_details
from reviewly.serializers import error_response

logger = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError):
        logger.warning(f"Service error ({int(e.status)}): {e.message}")
        return jsonify(error_response(e.message)), e.status

    @app.errorhandler(AuthError)
    def handle_auth_error(e: AuthError):
        logger.warning(f"Auth error ({int(e.status)}): {e.message}")
        return jsonify(error_response(e.message)), e.status

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Pydantic validation error: {e}")
        return jsonify(
            error_response("Datos inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        """Handle database errors."""
        logger.error(f"Database error: {e}", exc_info=True)
        return jsonify(error_response("Error de base de datos")), HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify(error_response("Ruta no encontrada")), HTTPStatus.NOT_FOUND

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify(error_response("Método no permitido")), HTTPStatus.METHOD_NOT_ALLOWED

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle the remaining HTTP exceptions from Werkzeug."""
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        return jsonify(error_response(e.description or str(e))), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle any unhandled exceptions."""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify(
            error_response("Error interno del servidor")
        ), HTTPStatus.INTERNAL_SERVER_ERROR
