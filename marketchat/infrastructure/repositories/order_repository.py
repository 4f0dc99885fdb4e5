"""Persistence helpers for orders reconciled against payment callbacks."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import case
from sqlalchemy.orm import Session

from marketchat.domain.entities import (
    ORDER_STATUS_PROCESSING,
    PAYMENT_METHOD_BKASH,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PAID,
    Order,
    OrderItem,
)
from marketchat.infrastructure.models import (
    CartItemModel,
    OrderModel,
    ProductModel,
    ShopModel,
)
from marketchat.utils import ensure_utc


class OrderRepository:
    """Provide lookups and payment state transitions for orders."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_order_number(self, order_number: str) -> Order | None:
        model = self._get_model(order_number)
        return self._to_entity(model) if model else None

    def find_by_payment_id(self, payment_id: str) -> Order | None:
        """Return the bKash order that was issued ``payment_id``."""

        model = (
            self.session.query(OrderModel)
            .filter(
                OrderModel.payment_method == PAYMENT_METHOD_BKASH,
                OrderModel.bkash_payment_id == payment_id,
            )
            .order_by(OrderModel.created_at.desc())
            .first()
        )
        return self._to_entity(model) if model else None

    def merge_metadata(self, order_number: str, updates: dict[str, Any]) -> Order | None:
        model = self._get_model(order_number)
        if model is None:
            return None
        model.payment_metadata = {**(model.payment_metadata or {}), **updates}
        if updates.get("bkash_payment_id"):
            model.bkash_payment_id = updates["bkash_payment_id"]
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_failed(
        self, order_number: str, *, details: dict[str, Any]
    ) -> tuple[Order | None, bool]:
        """Move a pending order to ``FAILED``.

        Paid and already failed orders are returned untouched, so redelivered
        failure callbacks leave the stored state unchanged. The flag tells
        whether a transition happened.
        """

        model = self._get_model(order_number, for_update=True)
        if model is None:
            self.session.rollback()
            return None, False
        if model.payment_status in (PAYMENT_STATUS_PAID, PAYMENT_STATUS_FAILED):
            self.session.rollback()
            return self._to_entity(model), False

        model.payment_status = PAYMENT_STATUS_FAILED
        model.payment_metadata = {**(model.payment_metadata or {}), **details}
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model), True

    def apply_payment_success(
        self, order_number: str, *, details: dict[str, Any]
    ) -> tuple[Order | None, bool]:
        """Mark the order paid, clear the ordered cart lines and take stock.

        Everything happens in one transaction on a locked order row. An order
        that is already ``PAID`` is returned with ``False`` and nothing else
        is touched.
        """

        model = self._get_model(order_number, for_update=True)
        if model is None:
            self.session.rollback()
            return None, False
        if model.payment_status == PAYMENT_STATUS_PAID:
            self.session.rollback()
            return self._to_entity(model), False

        model.payment_status = PAYMENT_STATUS_PAID
        model.status = ORDER_STATUS_PROCESSING
        model.payment_metadata = {**(model.payment_metadata or {}), **details}

        product_ids = [item.product_id for item in model.items]
        if product_ids:
            self.session.query(CartItemModel).filter(
                CartItemModel.user_id == model.user_id,
                CartItemModel.product_id.in_(product_ids),
            ).delete(synchronize_session=False)

        for item in model.items:
            self.session.query(ProductModel).filter(
                ProductModel.id == item.product_id
            ).update(
                {
                    ProductModel.stock: case(
                        (ProductModel.stock >= item.quantity, ProductModel.stock - item.quantity),
                        else_=0,
                    )
                },
                synchronize_session=False,
            )

        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model), True

    def list_shop_owner_ids(self, order: Order) -> list[str]:
        shop_ids = {item.shop_id for item in order.items if item.shop_id}
        if not shop_ids:
            return []
        rows = (
            self.session.query(ShopModel.owner_id)
            .filter(ShopModel.id.in_(shop_ids))
            .distinct()
            .all()
        )
        return [owner_id for (owner_id,) in rows]

    def _get_model(self, order_number: str, *, for_update: bool = False) -> OrderModel | None:
        query = self.session.query(OrderModel).filter(OrderModel.order_number == order_number)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def _to_entity(model: OrderModel) -> Order:
        items: Sequence[OrderItem] = [
            OrderItem(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                price=Decimal(item.price),
                shop_id=item.shop_id,
            )
            for item in model.items
        ]
        return Order(
            id=model.id,
            order_number=model.order_number,
            user_id=model.user_id,
            status=model.status,
            payment_status=model.payment_status,
            payment_method=model.payment_method,
            total=Decimal(model.total),
            currency=model.currency,
            metadata=dict(model.payment_metadata or {}),
            items=list(items),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


__all__ = ["OrderRepository"]
