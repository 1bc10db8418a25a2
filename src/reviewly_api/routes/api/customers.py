"""
Customers API - Registro de clientes y sus visitas semanales.

Requiere rol admin o manager en todos los endpoints.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from reviewly.db import get_database
from reviewly.errors import ServiceError
from reviewly.logging_config import get_logger
from reviewly.permissions import Permission, permission_required
from reviewly.schemas import (
    CreateCustomerRequest,
    UpdateCustomerRequest,
    WeekStateRequest,
    schema_error_details,
)
from reviewly.serializers import error_response, message_response, server_error_response
from reviewly.services import customer_service

# Create blueprint without url_prefix (inherited from parent)
customers_bp = Blueprint("customers", __name__)
logger = get_logger(__name__)


@customers_bp.get("/customers")
@permission_required(Permission.CUSTOMERS_VIEW)
def get_customers():
    try:
        with get_database().session() as session:
            customers = customer_service.list_customers(session)
        return jsonify(customers)
    except Exception as e:
        return server_error_response(logger, "Error al obtener clientes", e)


@customers_bp.post("/customers")
@permission_required(Permission.CUSTOMERS_EDIT)
def post_create_customer():
    """
    Crear cliente

    Body: Ver CreateCustomerRequest schema. Las 52 semanas inician en gris.
    """
    payload = request.get_json(silent=True) or {}

    try:
        customer_data = CreateCustomerRequest.model_validate(payload)
        with get_database().session() as session:
            customer = customer_service.create_customer(session, customer_data.model_dump())
        return jsonify(
            message_response("Cliente creado exitosamente", customer=customer)
        ), HTTPStatus.CREATED
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de cliente inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al crear cliente", e)


@customers_bp.put("/customers/<int:customer_id>")
@permission_required(Permission.CUSTOMERS_EDIT)
def put_update_customer(customer_id: int):
    """
    Actualizar cliente

    Body: Ver UpdateCustomerRequest schema. Las semanas se cambian con el
    endpoint de semanas.
    """
    payload = request.get_json(silent=True) or {}

    try:
        customer_data = UpdateCustomerRequest.model_validate(payload)
        with get_database().session() as session:
            customer = customer_service.update_customer(
                session, customer_id, customer_data.model_dump(exclude_unset=True)
            )
        return jsonify(message_response("Cliente actualizado", customer=customer))
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de actualización inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al actualizar cliente", e)


@customers_bp.delete("/customers/<int:customer_id>")
@permission_required(Permission.CUSTOMERS_DELETE)
def delete_customer(customer_id: int):
    try:
        with get_database().session() as session:
            customer_service.delete_customer(session, customer_id)
        return jsonify(message_response("Cliente eliminado"))
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al eliminar cliente", e)


@customers_bp.patch("/customers/<int:customer_id>/weeks/<week_index>")
@permission_required(Permission.CUSTOMERS_EDIT)
def patch_week_state(customer_id: int, week_index: str):
    """
    Cambiar el estado de una semana (0-51)

    Body:
        {"state": "gray" | "red" | "green"}
    """
    payload = request.get_json(silent=True) or {}

    try:
        week_data = WeekStateRequest.model_validate(payload)
        with get_database().session() as session:
            customer = customer_service.update_week_state(
                session, customer_id, week_index, week_data.state
            )
        return jsonify(message_response("Semana actualizada", customer=customer))
    except PydanticValidationError:
        return jsonify(error_response("El estado de semana es inválido")), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al actualizar semana", e)
