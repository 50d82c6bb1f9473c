"""Order domain logic: cart category, pickup validation, numbering and totals."""

import logging
import re
import unicodedata
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farine.core.config import settings
from farine.models.catalog import Product
from farine.models.order import Order, OrderItem
from farine.services.calendar_engine import (
    ProductCategory,
    earliest_selectable_date,
    is_pickup_date_allowed,
    resolve_day,
)
from farine.services.calendar_service import load_calendar_snapshot
from farine.services.order_status import ensure_status_exists

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# name prefix + YYMMDD before the daily counter
ORDER_NUMBER_PREFIX_LENGTH = 9
MAX_NUMBERING_ATTEMPTS = 5
PHONE_PATTERN = re.compile(r"^(?:(?:\+|00)33|0)[1-9](?:\d{2}){4}$")


class OrderValidationError(Exception):
    """Raised when a submitted order cannot be accepted."""


class PickupDateUnavailableError(OrderValidationError):
    """Raised when the pickup date is closed or too early for the cart."""

    def __init__(self, pickup_date: date, earliest: date) -> None:
        super().__init__(f"Pickup date {pickup_date.isoformat()} is not available; earliest is {earliest.isoformat()}")
        self.pickup_date = pickup_date
        self.earliest = earliest


def is_valid_phone_number(value: str) -> bool:
    """Accept French numbers such as ``06 12 34 56 78`` or ``+33 6 12 34 56 78``."""
    compact = re.sub(r"[\s.\-]", "", value or "")
    return PHONE_PATTERN.match(compact) is not None


def resolve_cart_category(category_names: Iterable[str]) -> ProductCategory:
    """A cart with at least one bread product takes the bread lead time."""
    for name in category_names:
        if ProductCategory.from_name(name, settings.bread_category_name) is ProductCategory.BREAD:
            return ProductCategory.BREAD
    return ProductCategory.OTHER


def line_subtotal(quantity: Decimal, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_price)).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_order_total(lines: Iterable[tuple[Decimal, Decimal]]) -> Decimal:
    """Sum ``(quantity, unit_price)`` pairs, each line rounded to cents."""
    return sum((line_subtotal(quantity, unit_price) for quantity, unit_price in lines), Decimal("0.00"))


def _name_prefix(customer_name: str) -> str:
    ascii_name = unicodedata.normalize("NFKD", customer_name).encode("ascii", "ignore").decode("ascii")
    letters = "".join(char for char in ascii_name if char.isalpha()).upper()
    return (letters[:3]).ljust(3, "X")


def generate_order_number(customer_name: str, created_date: date, daily_increment: int) -> str:
    """Build ``PPPYYMMDDNNN``: name prefix, creation date, daily counter."""
    return f"{_name_prefix(customer_name)}{created_date:%y%m%d}{daily_increment:03d}"




def next_daily_increment(db: Session, created_date: date) -> int:
    """Return the counter for the next order created on ``created_date``.

    The counter follows the highest suffix used that day, so it keeps growing
    past 999.
    """
    numbers: list[str] = [
        row.order_number for row in db.query(Order.order_number).filter(Order.created_date == created_date)
    ]
    suffixes = [
        int(number[ORDER_NUMBER_PREFIX_LENGTH:])
        for number in numbers
        if number[ORDER_NUMBER_PREFIX_LENGTH:].isdigit()
    ]
    return max(suffixes, default=len(numbers)) + 1


def _load_products(db: Session, product_ids: set[int]) -> dict[int, Product]:
    products: list[Product] = db.query(Product).filter(Product.id.in_(product_ids)).all() if product_ids else []
    return {product.id: product for product in products}


def create_order(
    db: Session,
    *,
    customer_name: str,
    customer_phone: str,
    pickup_date: date,
    pickup_time: time,
    customer_comment: str | None,
    lines: Sequence[tuple[int, Decimal]],
    now: datetime,
) -> Order:
    """Validate a storefront order and persist it with catalog prices."""
    name = customer_name.strip()
    if not name:
        raise OrderValidationError("Customer name is required")
    if not is_valid_phone_number(customer_phone):
        raise OrderValidationError("Invalid phone number (ex: 06 12 34 56 78)")
    if not lines:
        raise OrderValidationError("Cart is empty")

    products = _load_products(db, {product_id for product_id, _ in lines})
    for product_id, quantity in lines:
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise OrderValidationError(f"Product {product_id} is not available")
        if quantity <= 0:
            raise OrderValidationError("Quantity must be > 0")
        if product.unit == "unité" and quantity != quantity.to_integral_value():
            raise OrderValidationError(f"Product {product_id} is sold by unit")

    category = resolve_cart_category(products[product_id].category.name for product_id, _ in lines)
    schedule, overrides = load_calendar_snapshot(db)
    if not is_pickup_date_allowed(pickup_date, category, now, overrides, schedule):
        earliest = earliest_selectable_date(category, now, overrides, schedule, horizon_days=settings.pickup_horizon_days)
        raise PickupDateUnavailableError(pickup_date, earliest)

    pickup_day = resolve_day(pickup_date, overrides, schedule)
    if pickup_day.open_time is not None and pickup_day.close_time is not None:
        if not pickup_day.open_time <= pickup_time <= pickup_day.close_time:
            raise OrderValidationError(
                f"Pickup time must be between {pickup_day.open_time:%H:%M} and {pickup_day.close_time:%H:%M}"
            )

    created_date = now.date()
    order = Order(
        customer_name=name,
        customer_phone=customer_phone.strip(),
        pickup_date=pickup_date,
        pickup_time=pickup_time,
        customer_comment=(customer_comment or "").strip() or None,
        status=settings.default_order_status,
        created_date=created_date,
    )
    for product_id, quantity in lines:
        product = products[product_id]
        order.items.append(
            OrderItem(
                product_id=product.id,
                product_name=product.name,
                category_name=product.category.name,
                unit=product.unit,
                quantity=quantity,
                unit_price_ttc=product.price_ttc,
                subtotal_ttc=line_subtotal(quantity, product.price_ttc),
            )
        )
    order.total_ttc = calculate_order_total((item.quantity, item.unit_price_ttc) for item in order.items)

    for attempt in range(1, MAX_NUMBERING_ATTEMPTS + 1):
        order.order_number = generate_order_number(name, created_date, next_daily_increment(db, created_date))
        db.add(order)
        try:
            db.commit()
            break
        except IntegrityError:
            # a concurrent order took the same number
            db.rollback()
            if attempt == MAX_NUMBERING_ATTEMPTS:
                raise
            logger.warning("[ORDERS] Order number %s already taken, retrying", order.order_number)
    db.refresh(order)
    logger.info(
        "[ORDERS] Order %s created for pickup %s (%s cart, total %s)",
        order.order_number,
        order.pickup_date,
        category.value,
        order.total_ttc,
    )
    return order


def list_orders(db: Session, *, pickup_date: date | None = None, status: str | None = None) -> list[Order]:
    """Return back-office orders, soonest pickup first."""
    query = db.query(Order)
    if pickup_date is not None:
        query = query.filter(Order.pickup_date == pickup_date)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.pickup_date.asc(), Order.pickup_time.asc(), Order.id.asc()).all()


def update_order(db: Session, order: Order, changes: dict) -> Order:
    """Apply staff edits; a new status must be a known status name."""
    if "status" in changes and changes["status"] is not None:
        changes["status"] = ensure_status_exists(db, changes["status"])
    for field, value in changes.items():
        setattr(order, field, value)
    db.commit()
    db.refresh(order)
    logger.info("[ORDERS] Order %s updated: %s", order.order_number, ", ".join(sorted(changes)))
    return order


def delete_order(db: Session, order: Order) -> None:
    order_number = order.order_number
    db.delete(order)
    db.commit()
    logger.info("[ORDERS] Order %s deleted", order_number)


def dashboard_stats(db: Session, today: date) -> dict:
    """Counters for the back-office home page; revenue covers orders taken on ``today``."""
    total_orders: int = db.query(func.count(Order.id)).scalar() or 0
    pending_orders: int = (
        db.query(func.count(Order.id)).filter(Order.status == settings.default_order_status).scalar() or 0
    )
    active_products: int = db.query(func.count(Product.id)).filter(Product.is_active.is_(True)).scalar() or 0
    today_totals = [row.total_ttc for row in db.query(Order.total_ttc).filter(Order.created_date == today)]
    return {
        "total_orders": total_orders,
        "pending_orders": pending_orders,
        "active_products": active_products,
        "today_revenue": sum((Decimal(total) for total in today_totals), Decimal("0.00")),
    }


def production_report(db: Session, pickup_date: date) -> list[dict]:
    """Quantities to prepare per product for one pickup date, cancelled orders excluded."""
    rows = (
        db.query(
            OrderItem.product_name,
            OrderItem.category_name,
            OrderItem.unit,
            func.sum(OrderItem.quantity),
        )
        .join(Order, OrderItem.order_id == Order.id)
        .filter(Order.pickup_date == pickup_date, Order.status != settings.cancelled_order_status)
        .group_by(OrderItem.product_name, OrderItem.category_name, OrderItem.unit)
        .order_by(OrderItem.category_name.asc(), OrderItem.product_name.asc())
        .all()
    )
    return [
        {
            "product_name": product_name,
            "category_name": category_name,
            "unit": unit,
            "total_quantity": Decimal(str(total_quantity)),
            "pickup_date": pickup_date,
        }
        for product_name, category_name, unit, total_quantity in rows
    ]
