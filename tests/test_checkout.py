"""End-to-end checkout: cart store -> OrderSubmitter -> POST /api/orders."""

import httpx
import pytest
from sqlmodel import select

from app.cart.checkout import OrderSubmissionError, OrderSubmitter, default_submitter
from app.cart.config import get_cart_settings
from app.cart.storage import KeyValueCartStorage
from app.cart.store import CartStore
from app.models.order import Order
from app.models.tracking import OrderTracking
from app.schemas.order import ShippingAddress

from conftest import make_token, size


@pytest.fixture
def address() -> ShippingAddress:
    return ShippingAddress(
        type="office", street="4 Park St", city="Kolkata", state="WB", zip_code="700016"
    )


@pytest.fixture
def cart(pizza, fries) -> CartStore:
    store = CartStore(KeyValueCartStorage({}), notify=lambda m: None)
    store.add_item(pizza, 2, [size("Large", 50)])
    store.add_item(fries, 1)
    return store


def _offline_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler), base_url="http://orders.test")


class TestBuildPayload:
    def test_price_is_base_price_and_total_is_cart_total(self, cart, address):
        submitter = OrderSubmitter(_offline_client(lambda r: httpx.Response(201)), cart)
        payload = submitter.build_payload(address, "upi")

        pizza_item = payload["items"][0]
        assert pizza_item["price"] == 200
        assert pizza_item["customizations"] == [
            {"optionName": "Size", "selectedValues": [{"name": "Large", "price": 50.0}]}
        ]
        assert payload["totalAmount"] == cart.get_cart_totals().total
        assert payload["shippingAddress"]["zipCode"] == "700016"
        assert payload["paymentDetails"] == {"paymentMethod": "upi", "paymentStatus": "Pending"}


class TestSubmit:
    def test_success_clears_cart_and_returns_tracking(
        self, client, session, customer, cart, address
    ):
        total = cart.get_cart_totals().total
        submitter = OrderSubmitter(
            client, cart, access_token=make_token(customer.id, customer.email)
        )

        order = submitter.submit(address, "cod")

        assert cart.is_empty()
        assert order["trackingNumber"]
        assert order["totalAmount"] == total
        assert order["status"] == "Pending"
        assert order["paymentDetails"]["paymentStatus"] == "Pending"
        assert [i["price"] for i in order["items"]] == [200, 99]

        assert len(session.exec(select(Order)).all()) == 1
        assert len(session.exec(select(OrderTracking)).all()) == 1

    def test_server_rejection_keeps_cart(self, cart, address):
        def reject(request):
            return httpx.Response(500, json={"detail": "Order could not be placed"})

        submitter = OrderSubmitter(_offline_client(reject), cart)
        before = cart.items

        with pytest.raises(OrderSubmissionError) as exc:
            submitter.submit(address, "card")

        assert exc.value.status_code == 500
        assert exc.value.detail == "Order could not be placed"
        assert cart.items == before

    def test_transport_failure_keeps_cart(self, cart, address):
        def down(request):
            raise httpx.ConnectError("connection refused", request=request)

        submitter = OrderSubmitter(_offline_client(down), cart)
        before = cart.items

        with pytest.raises(OrderSubmissionError):
            submitter.submit(address, "card")
        assert cart.items == before

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(201, text="ok"),
            httpx.Response(201, json=[1]),
        ],
        ids=["not-json", "json-list"],
    )
    def test_unreadable_success_body_keeps_cart(self, cart, address, response):
        submitter = OrderSubmitter(_offline_client(lambda r: response), cart)
        before = cart.items

        with pytest.raises(OrderSubmissionError) as exc:
            submitter.submit(address, "upi")

        assert exc.value.status_code == 201
        assert cart.items == before

    def test_unauthenticated_submission_fails(self, client, cart, address):
        submitter = OrderSubmitter(client, cart)
        with pytest.raises(OrderSubmissionError) as exc:
            submitter.submit(address, "card")
        assert exc.value.status_code == 401
        assert not cart.is_empty()

    def test_empty_cart_is_rejected_before_calling(self, address):
        calls = []

        def record(request):
            calls.append(request)
            return httpx.Response(201, json={})

        store = CartStore(KeyValueCartStorage({}), notify=lambda m: None)
        with pytest.raises(OrderSubmissionError, match="Cart is empty"):
            OrderSubmitter(_offline_client(record), store).submit(address, "cod")
        assert calls == []


def test_default_submitter_reads_cart_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("CART_STORAGE_PATH", str(tmp_path / "cart.json"))
    monkeypatch.setenv("CART_API_BASE_URL", "http://orders.internal:9000")
    get_cart_settings.cache_clear()
    try:
        submitter = default_submitter(access_token="abc")
    finally:
        get_cart_settings.cache_clear()

    assert submitter.client.base_url.host == "orders.internal"
    assert submitter.client.base_url.port == 9000
    assert submitter.api_prefix == "/api"
    assert submitter.access_token == "abc"
    assert submitter.store.is_empty()
    submitter.client.close()
