# app/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.tracking_repo import TrackingRepository
from app.schemas.order import OrderCreate, OrderCreated, OrderRead
from app.schemas.tracking import (
    ReconcileResult,
    TrackingInfo,
    TrackingRead,
    TrackingStatusUpdate,
    TrackingUpdated,
)
from app.services.order_service import OrderService
from app.services.tracking_service import TrackingService

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
tracking_repo = TrackingRepository()
tracking_service = TrackingService(
    tracking_repo,
    order_repo,
    estimated_delivery_minutes=settings.ESTIMATED_DELIVERY_MINUTES,
    strict_transitions=settings.STRICT_STATUS_TRANSITIONS,
)
service = OrderService(order_repo, tracking_service)


# Static paths are declared before "/{order_id}" so they are not
# swallowed by the UUID path parameter.

# -------- User-facing endpoints --------


@router.post(
    "",
    response_model=OrderCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Place an order from a client-side cart snapshot.

    Returns the created order plus its tracking number.
    """
    return service.create_order(session, current_user.id, payload)


@router.get("", response_model=list[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders, newest first.
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get("/tracking/{tracking_number}", response_model=TrackingInfo)
def get_tracking_by_number(
    tracking_number: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Tracking projection by tracking number (owner or admin).
    """
    return tracking_service.get_by_tracking_number(session, current_user, tracking_number)


# -------- Admin endpoints --------


@router.get(
    "/all",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders (admin only).
    """
    return service.list_all_orders(session, skip, limit)


@router.post(
    "/tracking/reconcile",
    response_model=ReconcileResult,
    dependencies=[Depends(require_admin)],
)
def reconcile_tracking(session: Session = Depends(get_session)):
    """
    Create tracking records for orders that are missing one (admin only).
    """
    return tracking_service.reconcile_missing(session)


@router.put("/{order_id}/tracking", response_model=TrackingUpdated)
def update_tracking_status(
    order_id: uuid.UUID,
    payload: TrackingStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Update order tracking status (admin only).

      Pending -> Confirmed -> Preparing -> Out for Delivery -> Delivered
      Cancelled from any non-terminal state.

    Transitions are not validated unless STRICT_STATUS_TRANSITIONS is set.
    """
    info = tracking_service.update_status(session, order_id, payload, updated_by=admin.id)
    return TrackingUpdated(message="Tracking status updated successfully", tracking=info)


# -------- Per-order endpoints (owner or admin) --------


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order with items.
    """
    return service.get_order(session, current_user, order_id)


@router.get("/{order_id}/tracking", response_model=TrackingRead)
def get_order_tracking(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Full tracking record of an order, including status history.
    """
    return tracking_service.get_tracking_record(session, current_user, order_id)
