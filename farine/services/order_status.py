"""Order status helpers."""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from farine.core.config import settings
from farine.models.order import Order, OrderStatus

DEFAULT_ORDER_STATUSES: list[tuple[str, str]] = [
    (settings.default_order_status, "#FCD34D"),
    ("Prête", "#34D399"),
    ("Récupérée", "#60A5FA"),
    (settings.cancelled_order_status, "#F87171"),
]


class UnknownOrderStatusError(Exception):
    """Raised when an order is moved to a status that does not exist."""


class OrderStatusConflictError(Exception):
    """Raised when a status change would leave orders or settings pointing nowhere."""


def list_statuses(db: Session, active_only: bool = False) -> list[OrderStatus]:
    query = db.query(OrderStatus)
    if active_only:
        query = query.filter(OrderStatus.is_active.is_(True))
    return query.order_by(OrderStatus.sort_order.asc(), OrderStatus.id.asc()).all()


def create_status(db: Session, *, name: str, color: str, is_active: bool = True) -> OrderStatus:
    """Create a status at the end of the sort order."""
    max_sort_order: int | None = db.query(func.max(OrderStatus.sort_order)).scalar()
    status = OrderStatus(name=name.strip(), color=color, is_active=is_active, sort_order=(max_sort_order or 0) + 1)
    db.add(status)
    db.commit()
    db.refresh(status)
    return status


def _is_protected(status: OrderStatus) -> bool:
    return status.name in {settings.default_order_status, settings.cancelled_order_status}


def update_status(db: Session, status: OrderStatus, changes: dict) -> OrderStatus:
    """Edit a status; a rename is carried over to the orders that use it."""
    new_name = changes.get("name")
    if new_name is not None:
        new_name = new_name.strip()
        if new_name != status.name:
            if _is_protected(status):
                raise OrderStatusConflictError(f"{status.name} is a built-in status and cannot be renamed")
            if db.query(OrderStatus).filter(OrderStatus.name == new_name).first() is not None:
                raise OrderStatusConflictError(f"{new_name} already exists")
            db.query(Order).filter(Order.status == status.name).update(
                {Order.status: new_name}, synchronize_session=False
            )
            status.name = new_name
    if changes.get("color") is not None:
        status.color = changes["color"]
    if changes.get("is_active") is not None:
        status.is_active = changes["is_active"]
    db.commit()
    db.refresh(status)
    return status


def delete_status(db: Session, status: OrderStatus) -> None:
    """Delete a status that no order uses."""
    if _is_protected(status):
        raise OrderStatusConflictError(f"{status.name} is a built-in status and cannot be deleted")
    in_use: int = db.query(func.count(Order.id)).filter(Order.status == status.name).scalar() or 0
    if in_use:
        raise OrderStatusConflictError(f"{status.name} is used by {in_use} order(s)")
    db.delete(status)
    db.commit()


def ensure_status_exists(db: Session, name: str) -> str:
    """Return the status name if it is known, else raise."""
    status = db.query(OrderStatus).filter(OrderStatus.name == name).first()
    if status is None:
        raise UnknownOrderStatusError(name)
    return status.name


def ensure_default_statuses(db: Session) -> int:
    """Insert the default statuses that are missing; return how many were added."""
    existing: set[str] = {row.name for row in db.query(OrderStatus).all()}
    created = 0
    for sort_order, (name, color) in enumerate(DEFAULT_ORDER_STATUSES, start=1):
        if name in existing:
            continue
        db.add(OrderStatus(name=name, color=color, sort_order=sort_order, is_active=True))
        created += 1
    if created:
        db.commit()
    return created
