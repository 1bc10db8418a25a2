"""
Auth API - JWT-based authentication and account management endpoints.

Handles login, first-admin registration, the current identity and the
admin-only management of dashboard accounts.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from reviewly.auth.service import AuthError, AuthService
from reviewly.db import get_database
from reviewly.errors import ServiceError
from reviewly.jwt_middleware import (
    get_account_id,
    get_current_identity,
    jwt_optional,
    jwt_required,
)
from reviewly.jwt_service import create_access_token
from reviewly.logging_config import get_logger
from reviewly.permissions import Permission, permission_required
from reviewly.schemas import (
    CreateAccountRequest,
    LoginRequest,
    RegisterRequest,
    UpdateAccountRequest,
    schema_error_details,
)
from reviewly.serializers import error_response, message_response, server_error_response
from reviewly.services import account_service

# Create blueprint without url_prefix (inherited from parent)
auth_bp = Blueprint("auth", __name__)
logger = get_logger(__name__)


@auth_bp.post("/auth/login")
def post_login():
    """
    Autenticar una cuenta y emitir un token JWT.

    Body:
        {
            "username": str,
            "password": str
        }

    Returns:
        {
            "token": str,
            "user": {"id", "username", "email", "role"}
        }
    """
    payload = request.get_json(silent=True) or {}

    try:
        login_data = LoginRequest.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning(f"Login validation error: {e}")
        return jsonify(
            error_response("Por favor ingrese usuario y contraseña", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST

    try:
        with get_database().session() as session:
            auth_result = AuthService.authenticate(
                session, login_data.username, login_data.password
            )
        account = auth_result.account

        token = create_access_token(
            account_id=account.id,
            username=account.username,
            role=account.role,
        )
        logger.info(f"Account {account.id} ({account.username}) logged in via JWT")

        return jsonify(
            {
                "token": token,
                "user": {
                    "id": account.id,
                    "username": account.username,
                    "email": account.email,
                    "role": account.role,
                },
            }
        )
    except AuthError as e:
        logger.warning(f"Failed login for {login_data.username}: {e.message}")
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error en el servidor", e)


@auth_bp.post("/auth/register")
@jwt_optional
def post_register():
    """
    Registrar una cuenta.

    Sin cuentas existentes cualquiera puede registrar al primer administrador;
    después sólo un administrador autenticado.
    """
    payload = request.get_json(silent=True) or {}

    try:
        register_data = RegisterRequest.model_validate(payload)
        with get_database().session() as session:
            user = account_service.register_account(
                session, register_data.model_dump(), get_current_identity()
            )
        return jsonify(
            message_response("Administrador creado exitosamente", user=user)
        ), HTTPStatus.CREATED
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de registro inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except (AuthError, ServiceError) as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error en el servidor", e)


@auth_bp.get("/auth/me")
@jwt_required
def get_me():
    """Obtener la cuenta autenticada actual."""
    try:
        with get_database().session() as session:
            user = account_service.get_account(session, get_account_id())
        return jsonify({"user": user})
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al obtener usuario", e)


# ==================== ACCOUNT MANAGEMENT (ADMIN) ====================


@auth_bp.get("/auth/users")
@permission_required(Permission.ACCOUNTS_MANAGE)
def get_users():
    """Listar todas las cuentas, más recientes primero."""
    try:
        with get_database().session() as session:
            users = account_service.list_accounts(session)
        return jsonify({"users": users, "total": len(users)})
    except Exception as e:
        return server_error_response(logger, "Error al obtener usuarios", e)


@auth_bp.get("/auth/users/<int:user_id>")
@permission_required(Permission.ACCOUNTS_MANAGE)
def get_user(user_id: int):
    try:
        with get_database().session() as session:
            user = account_service.get_account(session, user_id)
        return jsonify({"user": user})
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al obtener usuario", e)


@auth_bp.post("/auth/users")
@permission_required(Permission.ACCOUNTS_MANAGE)
def post_create_user():
    """
    Crear una cuenta

    Body: Ver CreateAccountRequest schema
    """
    payload = request.get_json(silent=True) or {}

    try:
        user_data = CreateAccountRequest.model_validate(payload)
        with get_database().session() as session:
            user = account_service.create_account(session, user_data.model_dump())
        logger.info(f"Admin {get_account_id()} created account {user['id']}")
        return jsonify(
            message_response("Usuario creado exitosamente", user=user)
        ), HTTPStatus.CREATED
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de usuario inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al crear usuario", e)


@auth_bp.put("/auth/users/<int:user_id>")
@permission_required(Permission.ACCOUNTS_MANAGE)
def put_update_user(user_id: int):
    """
    Actualizar una cuenta

    Body: Ver UpdateAccountRequest schema. Nadie puede cambiar su propio rol
    ni desactivarse a sí mismo.
    """
    payload = request.get_json(silent=True) or {}

    try:
        user_data = UpdateAccountRequest.model_validate(payload)
        with get_database().session() as session:
            user = account_service.update_account(
                session, user_id, user_data.model_dump(exclude_unset=True), get_current_identity()
            )
        logger.info(f"Admin {get_account_id()} updated account {user_id}")
        return jsonify(message_response("Usuario actualizado exitosamente", user=user))
    except PydanticValidationError as e:
        return jsonify(
            error_response("Datos de actualización inválidos", schema_error_details(e))
        ), HTTPStatus.BAD_REQUEST
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al actualizar usuario", e)


@auth_bp.patch("/auth/users/<int:user_id>/activate")
@permission_required(Permission.ACCOUNTS_MANAGE)
def patch_activate_user(user_id: int):
    try:
        with get_database().session() as session:
            user = account_service.set_account_active(
                session, user_id, True, get_current_identity()
            )
        return jsonify(message_response("Usuario activado exitosamente", user=user))
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al activar usuario", e)


@auth_bp.patch("/auth/users/<int:user_id>/deactivate")
@permission_required(Permission.ACCOUNTS_MANAGE)
def patch_deactivate_user(user_id: int):
    try:
        with get_database().session() as session:
            user = account_service.set_account_active(
                session, user_id, False, get_current_identity()
            )
        return jsonify(message_response("Usuario desactivado exitosamente", user=user))
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al desactivar usuario", e)


@auth_bp.delete("/auth/users/<int:user_id>")
@permission_required(Permission.ACCOUNTS_MANAGE)
def delete_user(user_id: int):
    """Eliminar una cuenta. Nadie puede eliminarse a sí mismo."""
    try:
        with get_database().session() as session:
            account_service.delete_account(session, user_id, get_current_identity())
        logger.info(f"Admin {get_account_id()} deleted account {user_id}")
        return jsonify(message_response("Usuario eliminado exitosamente"))
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al eliminar usuario", e)
