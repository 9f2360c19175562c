# app/services/order_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.auth import ensure_owner_or_admin
from app.models.order import Order, OrderItem
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    OrderCreate,
    OrderCreated,
    OrderItemRead,
    OrderRead,
    PaymentDetails,
    ShippingAddress,
)
from app.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Persist the order snapshot submitted at checkout
      - Open its tracking record in the same transaction
      - Owner/admin scoped reads
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        tracking_service: TrackingService,
    ):
        self.order_repo = order_repo
        self.tracking_service = tracking_service

    # -------- User-facing operations --------

    def create_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: OrderCreate,
    ) -> OrderCreated:
        """
        Record an order submitted from the client cart.

        Steps:
          1. Create Order row (status='Pending', payment mocked).
          2. Create OrderItem rows from the submitted snapshot.
          3. Open the tracking record (+ first history entry).
          4. Commit once; any failure rolls back all three writes.

        Item prices and totalAmount are taken as submitted.
        """
        address = payload.shipping_address
        payment = payload.payment_details

        try:
            order = Order(
                user_id=user_id,
                total_amount=payload.total_amount,
                address_type=address.type,
                street=address.street,
                city=address.city,
                state=address.state,
                zip_code=address.zip_code,
                status="Pending",
                payment_method=payment.payment_method,
                payment_status=payment.payment_status,
                transaction_id=payment.transaction_id,
            )
            order = self.order_repo.create_order(session, order)

            items = [
                OrderItem(
                    order_id=order.id,
                    product_id=it.product,
                    quantity=it.quantity,
                    price=it.price,
                    customizations=[
                        c.model_dump(mode="json", by_alias=True) for c in it.customizations
                    ],
                )
                for it in payload.items
            ]
            items = self.order_repo.create_items(session, items)

            tracking = self.tracking_service.open_tracking(session, order)

            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Order creation failed for user %s; rolled back", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Order could not be placed",
            )

        session.refresh(order)
        logger.info(
            "Order %s placed by %s (tracking %s)",
            order.id,
            user_id,
            tracking.tracking_number,
        )

        dto = self._build_order_dto(order, items)
        return OrderCreated(
            **dto.model_dump(),
            tracking_number=tracking.tracking_number,
        )

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user, newest first.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return [
            self._build_order_dto(o, self.order_repo.list_items_for_order(session, o.id))
            for o in orders
        ]

    def get_order(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
    ) -> OrderRead:
        """
        Get a single order with items.

        - 404 if order not found
        - 403 if caller is neither the owner nor an admin
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        ensure_owner_or_admin(user, order.user_id)

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_dto(order, items)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        orders = self.order_repo.list_all(session, skip, limit)
        return [
            self._build_order_dto(o, self.order_repo.list_items_for_order(session, o.id))
            for o in orders
        ]

    # -------- Helper DTO builder --------

    def _build_order_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderRead:
        """
        Compose OrderRead from ORM rows, regrouping the flattened
        address and payment columns.
        """
        return OrderRead(
            id=order.id,
            user=order.user_id,
            items=[
                OrderItemRead(
                    product=it.product_id,
                    quantity=it.quantity,
                    price=it.price,
                    customizations=it.customizations,
                )
                for it in items
            ],
            total_amount=order.total_amount,
            shipping_address=ShippingAddress(
                type=order.address_type,
                street=order.street,
                city=order.city,
                state=order.state,
                zip_code=order.zip_code,
            ),
            status=order.status,
            payment_details=PaymentDetails(
                payment_method=order.payment_method,
                payment_status=order.payment_status,
                transaction_id=order.transaction_id,
            ),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
