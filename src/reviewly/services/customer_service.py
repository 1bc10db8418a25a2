"""
Customer visit tracker.

Each customer carries 52 weekly markers (gray/red/green) for the current
year. The list always has exactly 52 entries: it is created full and only
ever changed one index at a time.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from reviewly.errors import NotFoundError, ValidationError
from reviewly.logging_config import get_logger
from reviewly.models import Customer, default_week_states
from reviewly.serializers import serialize_customer
from reviewly.validation import validate_week_index, validate_week_state

logger = get_logger(__name__)

CONTACT_FIELDS = ("document", "phone", "email")


def _get_customer(session: Session, customer_id: int) -> Customer:
    customer = session.get(Customer, customer_id)
    if customer is None:
        logger.warning(f"Customer {customer_id} not found")
        raise NotFoundError("Cliente no encontrado")
    return customer


def list_customers(session: Session) -> list[dict[str, Any]]:
    customers = (
        session.execute(select(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()))
        .scalars()
        .all()
    )
    return [serialize_customer(c) for c in customers]


def create_customer(session: Session, data: dict[str, Any]) -> dict[str, Any]:
    """Create a customer with every week marked neutral."""
    customer = Customer(name=data["name"], week_states=default_week_states())
    # Contact fields go through the encrypting setters
    for field in CONTACT_FIELDS:
        setattr(customer, field, data.get(field))

    session.add(customer)
    session.flush()
    session.refresh(customer)

    logger.info(f"Created customer {customer.id}")
    return serialize_customer(customer)


def update_customer(session: Session, customer_id: int, data: dict[str, Any]) -> dict[str, Any]:
    """Partial update of name and contact fields; week markers are untouched."""
    if not data:
        raise ValidationError("No hay datos para actualizar")

    customer = _get_customer(session, customer_id)
    if data.get("name") is not None:
        customer.name = data["name"]
    for field in CONTACT_FIELDS:
        if field in data:
            setattr(customer, field, data[field])

    session.flush()
    session.refresh(customer)

    logger.info(f"Updated customer {customer.id}")
    return serialize_customer(customer)


def delete_customer(session: Session, customer_id: int) -> None:
    customer = _get_customer(session, customer_id)
    session.delete(customer)
    session.flush()
    logger.info(f"Deleted customer {customer_id}")


def update_week_state(
    session: Session, customer_id: int, week_index, state: str
) -> dict[str, Any]:
    """Set the marker of one week (0..51)."""
    week = validate_week_index(week_index)
    validate_week_state(state)

    customer = _get_customer(session, customer_id)
    customer.set_week_state(week, state)

    session.flush()
    session.refresh(customer)

    logger.info(f"Customer {customer.id} week {week} set to {state}")
    return serialize_customer(customer)
