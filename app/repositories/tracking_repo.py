# app/repositories/tracking_repo.py
import uuid

from sqlmodel import Session, select

from app.models.tracking import OrderTracking, TrackingEvent


class TrackingRepository:
    """
    Data access layer for order_tracking and tracking_events.

    - flush only; the calling service owns the transaction
    - history rows are appended, never updated or deleted
    """

    def get_by_order_id(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderTracking | None:
        stmt = select(OrderTracking).where(OrderTracking.order_id == order_id)
        return session.exec(stmt).first()

    def get_by_tracking_number(
        self,
        session: Session,
        tracking_number: str,
    ) -> OrderTracking | None:
        stmt = select(OrderTracking).where(
            OrderTracking.tracking_number == tracking_number
        )
        return session.exec(stmt).first()

    def tracking_number_exists(self, session: Session, tracking_number: str) -> bool:
        return self.get_by_tracking_number(session, tracking_number) is not None

    def create(self, session: Session, tracking: OrderTracking) -> OrderTracking:
        session.add(tracking)
        session.flush()
        session.refresh(tracking)
        return tracking

    def update(self, session: Session, tracking: OrderTracking) -> OrderTracking:
        session.add(tracking)
        session.flush()
        session.refresh(tracking)
        return tracking

    # ---- Status history ----

    def list_history(
        self,
        session: Session,
        tracking_id: uuid.UUID,
    ) -> list[TrackingEvent]:
        stmt = (
            select(TrackingEvent)
            .where(TrackingEvent.tracking_id == tracking_id)
            .order_by(TrackingEvent.id)
        )
        return session.exec(stmt).all()

    def append_event(self, session: Session, event: TrackingEvent) -> TrackingEvent:
        session.add(event)
        session.flush()
        session.refresh(event)
        return event
