"""
Waitresses API - Endpoints para gestión del personal calificable.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from reviewly.db import get_database
from reviewly.errors import ServiceError
from reviewly.jwt_middleware import get_account_id, get_current_identity, jwt_optional, jwt_required
from reviewly.logging_config import get_logger
from reviewly.permissions import Permission, permission_required
from reviewly.schemas import CreateStaffRequest, UpdateStaffRequest, schema_error_details
from reviewly.serializers import error_response, message_response, server_error_response
from reviewly.services import staff_service

# Create blueprint without url_prefix (inherited from parent)
waitresses_bp = Blueprint("waitresses", __name__)
logger = get_logger(__name__)


@waitresses_bp.get("/waitresses")
def get_active_waitresses():
    """
    Listar el personal activo (público)

    Cada registro incluye average_rating y review_count.
    """
    try:
        with get_database().session() as session:
            staff = staff_service.list_active_staff(session)
        return jsonify(staff)
    except Exception as e:
        return server_error_response(logger, "Error al obtener personal", e)


@waitresses_bp.get("/waitresses/admin/all")
@permission_required(Permission.STAFF_VIEW_ALL)
def get_all_waitresses():
    """
    Listar todo el personal, incluido el inactivo

    Requiere rol admin o manager.
    """
    try:
        with get_database().session() as session:
            staff = staff_service.list_all_staff(session)
        return jsonify(staff)
    except Exception as e:
        return server_error_response(logger, "Error al obtener personal", e)


@waitresses_bp.get("/waitresses/<int:staff_id>")
@jwt_optional
def get_waitress(staff_id: int):
    """
    Obtener un miembro del personal

    Los visitantes anónimos sólo ven personal activo.
    """
    try:
        with get_database().session() as session:
            staff = staff_service.get_staff(
                session, staff_id, include_inactive=get_current_identity() is not None
            )
        return jsonify(staff)
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al obtener personal", e)


@waitresses_bp.post("/waitresses")
@permission_required(Permission.STAFF_CREATE)
def post_create_waitress():
    """
    Crear un miembro del personal

    Body: Ver CreateStaffRequest schema. El código de empleado se genera
    automáticamente.
    """
    payload = request.get_json(silent=True) or {}

    try:
        staff_data = CreateStaffRequest.model_validate(payload)
        with get_database().session() as session:
            staff = staff_service.create_staff(session, staff_data.model_dump())
        logger.info(f"Account {get_account_id()} created staff member {staff['id']}")
        return jsonify(
            message_response("Personal creado exitosamente", waitress=staff)
        ), HTTPStatus.CREATED
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de personal inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al crear personal", e)


@waitresses_bp.put("/waitresses/<int:staff_id>")
@permission_required(Permission.STAFF_EDIT)
def put_update_waitress(staff_id: int):
    """
    Actualizar un miembro del personal

    Body: Ver UpdateStaffRequest schema. ``is_active: false`` lo oculta del
    listado público sin borrar sus reseñas.
    """
    payload = request.get_json(silent=True) or {}

    try:
        staff_data = UpdateStaffRequest.model_validate(payload)
        with get_database().session() as session:
            staff = staff_service.update_staff(
                session, staff_id, staff_data.model_dump(exclude_unset=True)
            )
        logger.info(f"Account {get_account_id()} updated staff member {staff_id}")
        return jsonify(message_response("Personal actualizado exitosamente", waitress=staff))
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de actualización inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al actualizar personal", e)


@waitresses_bp.delete("/waitresses/<int:staff_id>")
@permission_required(Permission.STAFF_DELETE)
def delete_waitress(staff_id: int):
    """
    Eliminar definitivamente un miembro del personal y todas sus reseñas

    Requiere rol admin.
    """
    try:
        with get_database().session() as session:
            removed = staff_service.delete_staff(session, staff_id)
        logger.info(
            f"Account {get_account_id()} deleted staff member {staff_id} ({removed} reviews)"
        )
        return jsonify(message_response("Personal eliminado exitosamente"))
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al eliminar personal", e)


@waitresses_bp.get("/waitresses/<int:staff_id>/stats")
@jwt_required
def get_waitress_stats(staff_id: int):
    """
    Estadísticas agregadas de un miembro del personal

    Devuelve conteo, promedio, promedios por categoría y distribución por
    estrellas. Sin reseñas todo vale cero.
    """
    try:
        with get_database().session() as session:
            stats = staff_service.get_staff_stats(session, staff_id)
        return jsonify(stats)
    except Exception as e:
        return server_error_response(logger, "Error al obtener estadísticas", e)
