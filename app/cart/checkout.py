# app/cart/checkout.py
import logging
from typing import Any

import httpx

from app.cart.config import get_cart_settings
from app.cart.storage import JsonFileCartStorage
from app.cart.store import CartStore
from app.schemas.order import PaymentMethod, ShippingAddress

logger = logging.getLogger(__name__)


class OrderSubmissionError(Exception):
    """
    The order was not placed. The cart is left as it was.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class OrderSubmitter:
    """
    Turns the current cart into a POST /orders call.

    - each item is sent with price = product base price; customization
      surcharges stay inside `customizations`
    - totalAmount is the cart total (fees and tax included)
    - payment is recorded as Pending, nothing is charged
    - the cart is cleared only after the server confirms the order
    """

    def __init__(
        self,
        client: httpx.Client,
        store: CartStore,
        api_prefix: str = "/api",
        access_token: str | None = None,
    ):
        self.client = client
        self.store = store
        self.api_prefix = api_prefix.rstrip("/")
        self.access_token = access_token

    def build_payload(
        self,
        address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> dict[str, Any]:
        totals = self.store.get_cart_totals()
        return {
            "items": [
                {
                    "product": item.product.id,
                    "quantity": item.quantity,
                    "price": item.product.base_price,
                    "customizations": [
                        c.model_dump(mode="json", by_alias=True)
                        for c in item.customizations
                    ],
                }
                for item in self.store.items
            ],
            "totalAmount": totals.total,
            "shippingAddress": address.model_dump(mode="json", by_alias=True),
            "paymentDetails": {
                "paymentMethod": payment_method,
                "paymentStatus": "Pending",
            },
        }

    def submit(
        self,
        address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> dict[str, Any]:
        """
        Place the order and return the created order (with trackingNumber).

        Raises:
            OrderSubmissionError: empty cart, transport failure, a
            non-2xx response or a success body that is not a JSON object.
            The cart is untouched in every case.
        """
        if self.store.is_empty():
            raise OrderSubmissionError("Cart is empty")

        payload = self.build_payload(address, payment_method)
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            response = self.client.post(
                f"{self.api_prefix}/orders",
                json=payload,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("Order submission failed: %s", e)
            raise OrderSubmissionError("Order was not placed") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail") if isinstance(body, dict) else response.text
            logger.error(
                "Order submission rejected (%s): %s", response.status_code, detail
            )
            raise OrderSubmissionError(
                "Order was not placed",
                status_code=response.status_code,
                detail=detail,
            )

        try:
            order = response.json()
        except ValueError:
            order = None
        if not isinstance(order, dict):
            logger.error(
                "Order submission returned an unreadable body (%s): %r",
                response.status_code,
                response.text[:200],
            )
            raise OrderSubmissionError(
                "Order was not placed",
                status_code=response.status_code,
                detail=response.text,
            )

        self.store.clear_cart()
        logger.info("Order %s placed, tracking %s", order.get("id"), order.get("trackingNumber"))
        return order


def default_submitter(access_token: str | None = None) -> OrderSubmitter:
    """
    Submitter wired from CART_* settings with a file-backed cart.
    """
    settings = get_cart_settings()
    store = CartStore(JsonFileCartStorage(settings.STORAGE_PATH))
    client = httpx.Client(base_url=settings.API_BASE_URL, timeout=settings.TIMEOUT)
    return OrderSubmitter(client, store, api_prefix=settings.API_PREFIX, access_token=access_token)
