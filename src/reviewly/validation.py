"""
Input validation utilities.
"""

from reviewly.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_SCORE,
    MIN_PASSWORD_LENGTH,
    MIN_SCORE,
    WEEKS_PER_YEAR,
    Gender,
    Roles,
    WeekState,
)
from reviewly.errors import ValidationError

__all__ = [
    "ValidationError",
    "validate_gender",
    "validate_pagination",
    "validate_password",
    "validate_role",
    "validate_score",
    "validate_week_index",
    "validate_week_state",
]


def validate_password(password: str) -> None:
    """Validate password presence and minimum length."""
    if not password:
        raise ValidationError("La contraseña es requerida")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
        )


def validate_role(role: str) -> None:
    if role not in Roles.all_values():
        raise ValidationError("Rol inválido")


def validate_gender(gender: str) -> None:
    if gender not in Gender.all_values():
        raise ValidationError("Género inválido")


def validate_score(category: str, value) -> int:
    """
    Validate one category score and return it as an int.

    Booleans are rejected even though they are ints in Python.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Calificación de {category} inválida (debe estar entre 1 y 5)")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < MIN_SCORE or value > MAX_SCORE:
        raise ValidationError(f"Calificación de {category} inválida (debe estar entre 1 y 5)")
    return value


def validate_week_index(week_index) -> int:
    try:
        week = int(week_index)
    except (TypeError, ValueError):
        raise ValidationError("El índice de semana es inválido") from None
    if week < 0 or week >= WEEKS_PER_YEAR:
        raise ValidationError("El índice de semana es inválido")
    return week


def validate_week_state(state: str) -> str:
    if state not in WeekState.all_values():
        raise ValidationError("El estado de semana es inválido")
    return state


def validate_pagination(
    page: int | None, limit: int | None, default_limit: int = DEFAULT_PAGE_SIZE
) -> tuple[int, int]:
    """
    Validate and normalize pagination parameters.

    Returns: (page, limit) tuple with validated values.
    """
    if page is None or page < 1:
        page = 1

    if limit is None or limit < 1:
        limit = default_limit
    elif limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE

    return page, limit
