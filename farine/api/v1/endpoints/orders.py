"""Order endpoints: storefront capture and back-office administration."""

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farine.db.session import get_db
from farine.models.order import Order, OrderStatus
from farine.schemas.order import (
    DashboardStatsResponse,
    OrderCreate,
    OrderResponse,
    OrderStatusCreate,
    OrderStatusResponse,
    OrderStatusUpdate,
    OrderUpdate,
    ProductionLineResponse,
)
from farine.services.order_service import (
    OrderValidationError,
    PickupDateUnavailableError,
    create_order,
    dashboard_stats,
    delete_order,
    list_orders,
    production_report,
    update_order,
)
from farine.services.order_status import (
    OrderStatusConflictError,
    UnknownOrderStatusError,
    create_status,
    delete_status,
    list_statuses,
    update_status,
)
from farine.utils.time import local_now

router: APIRouter = APIRouter()


def _require_order(db: Session, order_id: int) -> Order:
    order: Order | None = db.get(Order, order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


def _require_status(db: Session, status_id: int) -> OrderStatus:
    order_status: OrderStatus | None = db.get(OrderStatus, status_id)
    if order_status is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Status not found")
    return order_status


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def submit_order(payload: OrderCreate, db: Session = Depends(get_db)) -> Order:
    """Capture a storefront order after validating its pickup slot."""
    now: datetime = local_now()
    try:
        return create_order(
            db,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            pickup_date=payload.pickup_date,
            pickup_time=payload.pickup_time,
            customer_comment=payload.customer_comment,
            lines=[(item.product_id, item.quantity) for item in payload.items],
            now=now,
        )
    except PickupDateUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "earliest_pickup_date": exc.earliest.isoformat()},
        ) from exc
    except OrderValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("", response_model=list[OrderResponse])
def get_orders(
    pickup_date: date | None = Query(default=None),
    status_value: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[Order]:
    return list_orders(db, pickup_date=pickup_date, status=status_value)


@router.get("/production", response_model=list[ProductionLineResponse])
def get_production(pickup_date: date = Query(), db: Session = Depends(get_db)) -> list[dict]:
    """Quantities to bake for one pickup date."""
    return production_report(db, pickup_date)


@router.get("/dashboard", response_model=DashboardStatsResponse)
def get_dashboard(db: Session = Depends(get_db)) -> dict:
    return dashboard_stats(db, local_now().date())


@router.get("/statuses", response_model=list[OrderStatusResponse])
def get_statuses(
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[OrderStatus]:
    return list_statuses(db, active_only=active_only)


@router.post("/statuses", response_model=OrderStatusResponse, status_code=status.HTTP_201_CREATED)
def post_status(payload: OrderStatusCreate, db: Session = Depends(get_db)) -> OrderStatus:
    try:
        return create_status(db, name=payload.name, color=payload.color, is_active=payload.is_active)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Status already exists") from exc


@router.patch("/statuses/{status_id}", response_model=OrderStatusResponse)
def patch_status(status_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)) -> OrderStatus:
    """Rename, recolor or toggle a status."""
    order_status = _require_status(db, status_id)
    try:
        return update_status(db, order_status, payload.model_dump(exclude_unset=True))
    except OrderStatusConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/statuses/{status_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_status(status_id: int, db: Session = Depends(get_db)) -> Response:
    order_status = _require_status(db, status_id)
    try:
        delete_status(db, order_status)
    except OrderStatusConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)) -> Order:
    return _require_order(db, order_id)


@router.patch("/{order_id}", response_model=OrderResponse)
def patch_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)) -> Order:
    """Staff edit: status, internal comment or pickup slot."""
    order = _require_order(db, order_id)
    try:
        return update_order(db, order, payload.model_dump(exclude_unset=True))
    except UnknownOrderStatusError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown status: {exc}") from exc


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_order(order_id: int, db: Session = Depends(get_db)) -> Response:
    delete_order(db, _require_order(db, order_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
