"""Shared fixtures for the API and use case tests."""

from __future__ import annotations

import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="marketchat-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SITE_URL"] = "https://shop.example.com"
for _name in (
    "BKASH_BASE_URL",
    "BKASH_USERNAME",
    "BKASH_PASSWORD",
    "BKASH_APP_KEY",
    "BKASH_APP_SECRET",
):
    os.environ.pop(_name, None)

from fastapi.testclient import TestClient  # noqa: E402

from marketchat.infrastructure import database  # noqa: E402
from marketchat.infrastructure.models import (  # noqa: E402
    CartItemModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    ShopModel,
    UserModel,
)
from marketchat.infrastructure.security import create_access_token  # noqa: E402


class RecordingPublisher:
    """Collects published events instead of delivering them."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, Any]] = []

    def publish(self, channel: str, event: str, payload: Any) -> None:
        self.events.append((channel, event, payload))

    def publish_many(self, channels, event: str, payload: Any) -> None:
        for channel in dict.fromkeys(channels):
            self.publish(channel, event, payload)

    def on(self, channel: str, event: str | None = None) -> list[Any]:
        return [
            payload
            for recorded_channel, recorded_event, payload in self.events
            if recorded_channel == channel and (event is None or recorded_event == event)
        ]


class FakeBkashClient:
    """Stands in for :class:`BkashClient` with canned provider answers."""

    def __init__(
        self,
        *,
        execute: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
        create: dict[str, Any] | None = None,
    ) -> None:
        self.execute_response = execute or {}
        self.query_response = query or {}
        self.create_response = create or {}
        self.calls: list[tuple[str, Any]] = []

    def create_payment(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("create", kwargs))
        return dict(self.create_response)

    def execute_payment(self, payment_id: str) -> dict[str, Any]:
        self.calls.append(("execute", payment_id))
        return dict(self.execute_response)

    def query_payment(self, payment_id: str) -> dict[str, Any]:
        self.calls.append(("query", payment_id))
        return dict(self.query_response)

    def close(self) -> None:
        pass


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test empty tables."""

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture()
def db_session():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def app(publisher: RecordingPublisher):
    from main import create_app
    from marketchat.interfaces.api.dependencies import get_publisher

    application = create_app()
    application.dependency_overrides[get_publisher] = lambda: publisher
    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session):
    def _make_user(user_id: str, *, name: str | None = None, role: str = "CUSTOMER") -> str:
        db_session.add(
            UserModel(id=user_id, name=name or user_id.title(), username=user_id, role=role)
        )
        db_session.commit()
        return user_id

    return _make_user


@pytest.fixture()
def auth_headers():
    def _auth_headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _auth_headers


@pytest.fixture()
def make_order(db_session, make_user):
    """Create a vendor shop, a product, a cart line and a pending bKash order."""

    def _make_order(
        *,
        buyer_id: str = "buyer",
        vendor_id: str = "vendor",
        order_number: str = "ORD-1001",
        quantity: int = 2,
        stock: int = 10,
        payment_id: str | None = "PAY-1",
    ) -> dict[str, str]:
        make_user(buyer_id)
        make_user(vendor_id, role="VENDOR")
        shop = ShopModel(name="Vendor Shop", owner_id=vendor_id)
        db_session.add(shop)
        db_session.flush()
        product = ProductModel(name="Tea", sku=f"SKU-{order_number}", stock=stock, shop_id=shop.id)
        other_product = ProductModel(
            name="Cup", sku=f"SKU-{order_number}-2", stock=5, shop_id=shop.id
        )
        db_session.add_all([product, other_product])
        db_session.flush()
        db_session.add_all(
            [
                CartItemModel(user_id=buyer_id, product_id=product.id, quantity=quantity),
                CartItemModel(user_id=buyer_id, product_id=other_product.id, quantity=1),
            ]
        )
        metadata = {"bkash_payment_id": payment_id} if payment_id else {}
        order = OrderModel(
            order_number=order_number,
            user_id=buyer_id,
            total=Decimal("250.00"),
            payment_method="BKASH",
            bkash_payment_id=payment_id,
            payment_metadata=metadata,
        )
        order.items.append(
            OrderItemModel(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                price=Decimal("125.00"),
                shop_id=shop.id,
            )
        )
        db_session.add(order)
        db_session.commit()
        return {
            "order_number": order_number,
            "product_id": product.id,
            "other_product_id": other_product.id,
            "buyer_id": buyer_id,
            "vendor_id": vendor_id,
        }

    return _make_order


@pytest.fixture()
def fake_bkash():
    return FakeBkashClient
