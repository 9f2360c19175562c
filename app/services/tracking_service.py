# app/services/tracking_service.py
import logging
import secrets
import string
import time
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.auth import ensure_owner_or_admin
from app.models.order import Order
from app.models.tracking import OrderTracking, TrackingEvent
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.tracking_repo import TrackingRepository
from app.schemas.tracking import (
    DeliveryAddress,
    DeliveryPerson,
    ReconcileResult,
    StatusHistoryEntry,
    TrackingInfo,
    TrackingRead,
    TrackingStatusUpdate,
)

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "FD"
TRACKING_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
TRACKING_SUFFIX_LENGTH = 4
MAX_TRACKING_NUMBER_ATTEMPTS = 5

PLACED_NOTE = "Order placed successfully"
RECONCILED_NOTE = "Tracking record reconciled"

# Only consulted when strict transitions are enabled.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "Pending": {"Confirmed", "Cancelled"},
    "Confirmed": {"Preparing", "Cancelled"},
    "Preparing": {"Out for Delivery", "Cancelled"},
    "Out for Delivery": {"Delivered", "Cancelled"},
    "Delivered": set(),
    "Cancelled": set(),
}


def generate_tracking_number() -> str:
    """
    Build a human-referenceable tracking number:

        FD + last 10 digits of a microsecond timestamp + 4 random chars
        e.g. "FD4829301127K9QZ"
    """
    stamp = str(time.time_ns() // 1_000)[-10:]
    suffix = "".join(
        secrets.choice(TRACKING_SUFFIX_ALPHABET) for _ in range(TRACKING_SUFFIX_LENGTH)
    )
    return f"{TRACKING_PREFIX}{stamp}{suffix}"


class TrackingService:
    """
    Order tracking state machine.

    Lifecycle:
      Pending -> Confirmed -> Preparing -> Out for Delivery -> Delivered
      Cancelled reachable from any non-terminal state.

    By default any status is accepted (permissive); set strict_transitions
    to reject moves outside ALLOWED_TRANSITIONS.

    Every update appends exactly one history row, so the last history
    entry always matches current_status.
    """

    def __init__(
        self,
        tracking_repo: TrackingRepository,
        order_repo: OrderRepository,
        estimated_delivery_minutes: int = 45,
        strict_transitions: bool = False,
        number_factory=generate_tracking_number,
    ):
        self.tracking_repo = tracking_repo
        self.order_repo = order_repo
        self.estimated_delivery_minutes = estimated_delivery_minutes
        self.strict_transitions = strict_transitions
        self.number_factory = number_factory

    # ---- internal helpers ----

    def _new_tracking_number(self, session: Session) -> str:
        for _ in range(MAX_TRACKING_NUMBER_ATTEMPTS):
            candidate = self.number_factory()
            if not self.tracking_repo.tracking_number_exists(session, candidate):
                return candidate
            logger.warning("Tracking number collision on %s, retrying", candidate)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not allocate a tracking number",
        )

    def _get_for_order(self, session: Session, order_id: uuid.UUID) -> OrderTracking:
        tracking = self.tracking_repo.get_by_order_id(session, order_id)
        if not tracking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Tracking information not found",
            )
        return tracking

    def _check_transition(self, current: str, new: str) -> None:
        if not self.strict_transitions:
            return
        if new not in ALLOWED_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

    def _history(
        self,
        session: Session,
        tracking: OrderTracking,
    ) -> list[StatusHistoryEntry]:
        return [
            StatusHistoryEntry(
                status=ev.status,
                timestamp=ev.timestamp,
                location=ev.location,
                notes=ev.notes,
                updated_by=ev.updated_by,
            )
            for ev in self.tracking_repo.list_history(session, tracking.id)
        ]

    @staticmethod
    def _delivery_person(tracking: OrderTracking) -> DeliveryPerson | None:
        if not tracking.delivery_person_name:
            return None
        return DeliveryPerson(
            name=tracking.delivery_person_name,
            phone=tracking.delivery_person_phone,
            vehicle_number=tracking.delivery_person_vehicle_number,
        )

    # ---- creation ----

    def open_tracking(
        self,
        session: Session,
        order: Order,
        initial_status: str = "Pending",
        notes: str = PLACED_NOTE,
    ) -> OrderTracking:
        """
        Create the tracking row and its first history entry for an order.

        Does NOT commit; it joins the caller's transaction so the order
        and its tracking are written together.
        """
        now = datetime.now(timezone.utc)
        tracking = OrderTracking(
            order_id=order.id,
            user_id=order.user_id,
            tracking_number=self._new_tracking_number(session),
            current_status=initial_status,
            estimated_delivery_time=now + timedelta(minutes=self.estimated_delivery_minutes),
            delivery_address_type=order.address_type,
            delivery_street=order.street,
            delivery_city=order.city,
            delivery_state=order.state,
            delivery_zip_code=order.zip_code,
            created_at=now,
            updated_at=now,
        )
        tracking = self.tracking_repo.create(session, tracking)

        self.tracking_repo.append_event(
            session,
            TrackingEvent(
                tracking_id=tracking.id,
                status=initial_status,
                timestamp=now,
                notes=notes,
            ),
        )
        return tracking

    def reconcile_missing(self, session: Session) -> ReconcileResult:
        """
        Create tracking records for orders that have none.

        The new record starts at the order's mirrored status so the two
        copies agree.
        """
        created: list[str] = []
        for order in self.order_repo.list_without_tracking(session):
            tracking = self.open_tracking(
                session,
                order,
                initial_status=order.status,
                notes=RECONCILED_NOTE,
            )
            created.append(tracking.tracking_number)
            logger.info(
                "Reconciled tracking %s for order %s", tracking.tracking_number, order.id
            )

        session.commit()
        return ReconcileResult(reconciled=len(created), tracking_numbers=created)

    # ---- reads ----

    def get_tracking_record(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
    ) -> TrackingRead:
        tracking = self._get_for_order(session, order_id)
        ensure_owner_or_admin(user, tracking.user_id)
        return TrackingRead(
            id=tracking.id,
            order_id=tracking.order_id,
            user=tracking.user_id,
            tracking_number=tracking.tracking_number,
            current_status=tracking.current_status,
            status_history=self._history(session, tracking),
            estimated_delivery_time=tracking.estimated_delivery_time,
            actual_delivery_time=tracking.actual_delivery_time,
            delivery_address=DeliveryAddress(
                type=tracking.delivery_address_type,
                street=tracking.delivery_street,
                city=tracking.delivery_city,
                state=tracking.delivery_state,
                zip_code=tracking.delivery_zip_code,
            ),
            delivery_person=self._delivery_person(tracking),
            special_instructions=tracking.special_instructions,
            is_active=tracking.is_active,
            created_at=tracking.created_at,
            updated_at=tracking.updated_at,
        )

    def get_by_tracking_number(
        self,
        session: Session,
        user: User,
        tracking_number: str,
    ) -> TrackingInfo:
        tracking = self.tracking_repo.get_by_tracking_number(session, tracking_number)
        if not tracking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Tracking information not found",
            )
        ensure_owner_or_admin(user, tracking.user_id)
        return self.get_current_tracking_info(session, tracking)

    def get_current_tracking_info(
        self,
        session: Session,
        tracking: OrderTracking,
    ) -> TrackingInfo:
        """
        Projection of a tracking record.

        last_update is the latest history timestamp, or the record's
        creation time when history is empty.
        """
        history = self._history(session, tracking)
        last_update = history[-1].timestamp if history else tracking.created_at
        return TrackingInfo(
            tracking_number=tracking.tracking_number,
            current_status=tracking.current_status,
            last_update=last_update,
            estimated_delivery=tracking.estimated_delivery_time,
            status_history=history,
        )

    # ---- admin operations ----

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: TrackingStatusUpdate,
        updated_by: uuid.UUID | None = None,
    ) -> TrackingInfo:
        """
        Move an order to a new status (admin only, enforced at router).

          - sets current_status and appends a history entry
          - first move to Delivered stamps actual_delivery_time
          - records the delivery person when one is given
          - mirrors the status onto the Order row
        All in one commit.
        """
        tracking = self._get_for_order(session, order_id)
        self._check_transition(tracking.current_status, payload.status)

        now = datetime.now(timezone.utc)
        tracking.current_status = payload.status
        tracking.updated_at = now
        if payload.status == "Delivered" and tracking.actual_delivery_time is None:
            tracking.actual_delivery_time = now
        if payload.delivery_person is not None:
            tracking.delivery_person_name = payload.delivery_person.name
            tracking.delivery_person_phone = payload.delivery_person.phone
            tracking.delivery_person_vehicle_number = payload.delivery_person.vehicle_number
        self.tracking_repo.update(session, tracking)

        self.tracking_repo.append_event(
            session,
            TrackingEvent(
                tracking_id=tracking.id,
                status=payload.status,
                timestamp=now,
                location=payload.location,
                notes=payload.notes,
                updated_by=updated_by,
            ),
        )

        order = self.order_repo.get_by_id(session, order_id)
        if order is not None:
            order.status = payload.status
            order.updated_at = now
            self.order_repo.update_order(session, order)

        session.commit()
        session.refresh(tracking)
        logger.info(
            "Order %s moved to %s (tracking %s)",
            order_id,
            payload.status,
            tracking.tracking_number,
        )
        return self.get_current_tracking_info(session, tracking)
