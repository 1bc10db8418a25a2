"""
Reviews API - Envío público de reseñas y moderación.

Un visitante puede dejar una sola reseña por ventana de tiempo (24h por
defecto), sin importar a qué miembro del personal califique.
"""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from reviewly.constants import DEFAULT_DUPLICATE_WINDOW_HOURS
from reviewly.db import get_database
from reviewly.errors import DuplicateReviewError, ServiceError
from reviewly.jwt_middleware import get_account_id, jwt_required
from reviewly.logging_config import LoggerAdapter, get_logger
from reviewly.permissions import Permission, permission_required
from reviewly.security_middleware import get_client_ip
from reviewly.serializers import error_response, message_response, server_error_response
from reviewly.services import review_service

# Create blueprint without url_prefix (inherited from parent)
reviews_bp = Blueprint("reviews", __name__)
logger = get_logger(__name__)


def _window_hours() -> int:
    return current_app.config.get("DUPLICATE_WINDOW_HOURS", DEFAULT_DUPLICATE_WINDOW_HOURS)


# ==================== PUBLIC ENDPOINTS ====================


@reviews_bp.post("/reviews")
def post_submit_review():
    """
    Enviar una reseña (público)

    Body:
        {
            "staff_id": int,
            "ratings": {"attentiveness": 1-5, "cleanliness": 1-5, "speed": 1-5,
                        "menu_knowledge": 1-5, "presentation": 1-5},
            "category_comments": {<categoría>: str} (opcional),
            "comment": str (opcional),
            "customer_name": str (opcional)
        }

    Responde 429 si esta dirección ya calificó dentro de la ventana.
    """
    payload = request.get_json(silent=True) or {}
    client_ip = get_client_ip()
    request_logger = LoggerAdapter(logger, {"client_ip": client_ip})

    try:
        with get_database().session() as session:
            review = review_service.submit_review(
                session, payload, client_ip, window_hours=_window_hours()
            )
        request_logger.info(f"Review {review['id']} accepted")
        return jsonify(
            message_response("¡Gracias por tu reseña!", review=review)
        ), HTTPStatus.CREATED
    except DuplicateReviewError as e:
        request_logger.warning("Review rejected inside duplicate window")
        return jsonify({"duplicate": True, "message": e.message}), e.status
    except ServiceError as e:
        request_logger.warning(f"Review rejected: {e.message}")
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al enviar reseña", e)


@reviews_bp.get("/reviews/check-duplicate/<int:staff_id>")
def get_check_duplicate(staff_id: int):
    """
    Verificar si el visitante ya dejó una reseña en esta visita

    La comprobación abarca a todo el personal; ``staff_id`` sólo identifica
    desde qué formulario se consulta.
    """
    try:
        with get_database().session() as session:
            result = review_service.check_duplicate(
                session, get_client_ip(), window_hours=_window_hours()
            )
        return jsonify(result)
    except DuplicateReviewError as e:
        return jsonify({"duplicate": True, "message": e.message}), e.status
    except Exception as e:
        return server_error_response(logger, "Error al verificar reseña", e)


@reviews_bp.get("/reviews/waitress/<int:staff_id>")
def get_waitress_reviews(staff_id: int):
    """
    Reseñas de un miembro del personal (público), más recientes primero

    Query params:
        - page: int (opcional)
        - limit: int (opcional, 10 por defecto)
    """
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)

    try:
        with get_database().session() as session:
            result = review_service.list_staff_reviews(session, staff_id, page=page, limit=limit)
        return jsonify(result)
    except Exception as e:
        return server_error_response(logger, "Error al obtener reseñas", e)


# ==================== MODERATION ENDPOINTS ====================


@reviews_bp.get("/reviews")
@jwt_required
def get_reviews():
    """
    Listar reseñas con filtros

    Query params:
        - page, limit: paginación (20 por defecto, máximo 100)
        - rating: int 1-5, reseñas cuyo promedio redondeado es ese valor
        - waitress_id: int
    """
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)
    rating = request.args.get("rating", type=int)
    staff_id = request.args.get("waitress_id", type=int)

    try:
        with get_database().session() as session:
            result = review_service.list_reviews(
                session, page=page, limit=limit, rating=rating, staff_id=staff_id
            )
        return jsonify(result)
    except Exception as e:
        return server_error_response(logger, "Error al obtener reseñas", e)


@reviews_bp.delete("/reviews/<int:review_id>")
@permission_required(Permission.REVIEWS_DELETE)
def delete_review(review_id: int):
    try:
        with get_database().session() as session:
            review_service.delete_review(session, review_id)
        logger.info(f"Account {get_account_id()} deleted review {review_id}")
        return jsonify(message_response("Reseña eliminada exitosamente"))
    except ServiceError as e:
        return jsonify(error_response(e.message)), e.status
    except Exception as e:
        return server_error_response(logger, "Error al eliminar reseña", e)


@reviews_bp.get("/reviews/stats/overall")
@jwt_required
def get_overall_stats():
    """
    Estadísticas generales para el panel

    Incluye el agregado global, el personal activo y las 5 reseñas más
    recientes.
    """
    try:
        with get_database().session() as session:
            stats = review_service.get_overall_stats(session)
        return jsonify(stats)
    except Exception as e:
        return server_error_response(logger, "Error al obtener estadísticas", e)
