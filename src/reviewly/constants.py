"""
Application constants and enums.
"""

from enum import Enum


class Roles(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    # Reserved: enumerated for accounts but granted no permission
    USUARIO = "usuario"

    @classmethod
    def all_values(cls) -> set:
        return {member.value for member in cls}


class Gender(str, Enum):
    """Grammatical gender used when displaying a staff member."""

    MESERO = "mesero"
    MESERA = "mesera"

    @classmethod
    def all_values(cls) -> set:
        return {member.value for member in cls}


class ReviewCategory(str, Enum):
    """The five fixed categories every review scores."""

    ATTENTIVENESS = "attentiveness"
    CLEANLINESS = "cleanliness"
    SPEED = "speed"
    MENU_KNOWLEDGE = "menu_knowledge"
    PRESENTATION = "presentation"


class WeekState(str, Enum):
    """Visit marker for one calendar week of a customer."""

    NEUTRAL = "gray"
    FLAGGED = "red"
    CONFIRMED = "green"

    @classmethod
    def all_values(cls) -> set:
        return {member.value for member in cls}


REVIEW_CATEGORIES = [category.value for category in ReviewCategory]

MIN_SCORE = 1
MAX_SCORE = 5

WEEKS_PER_YEAR = 52

EMPLOYEE_CODE_PREFIX = "EMP-"
EMPLOYEE_CODE_LENGTH = 8

DEFAULT_DUPLICATE_WINDOW_HOURS = 24

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
STAFF_REVIEWS_PAGE_SIZE = 10
RECENT_REVIEWS_LIMIT = 5

CATEGORY_COMMENT_MAX_LENGTH = 300
COMMENT_MAX_LENGTH = 500
CUSTOMER_NAME_MAX_LENGTH = 100

MIN_PASSWORD_LENGTH = 6

DUPLICATE_REVIEW_MESSAGE = "Ya has calificado a nuestro personal en esta visita"
