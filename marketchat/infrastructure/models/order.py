"""SQLAlchemy models for orders and the catalog rows payment success touches."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from marketchat.infrastructure.database import Base, generate_id
from marketchat.utils import utcnow_naive


class ShopModel(Base):
    __tablename__ = "shop"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(120), nullable=False)
    owner_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)


class ProductModel(Base):
    """Catalog product. Only ``stock`` is written by this service."""

    __tablename__ = "product"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    sku = Column(String(64), nullable=True, unique=True)
    stock = Column(Integer, nullable=False, default=0)
    shop_id = Column(String(32), ForeignKey("shop.id"), nullable=True, index=True)


class CartItemModel(Base):
    __tablename__ = "cart_item"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    product_id = Column(String(32), ForeignKey("product.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=utcnow_naive)


class OrderModel(Base):
    """Database representation of an order and its payment audit trail."""

    __tablename__ = "order"

    id = Column(String(32), primary_key=True, default=generate_id)
    order_number = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="PENDING")
    payment_status = Column(String(20), nullable=False, default="PENDING", index=True)
    payment_method = Column(String(30), nullable=False, default="BKASH")
    bkash_payment_id = Column(String(64), nullable=True, index=True)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="BDT")
    # ``metadata`` is reserved on declarative classes.
    payment_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow_naive)
    updated_at = Column(DateTime, nullable=True, onupdate=utcnow_naive)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class OrderItemModel(Base):
    __tablename__ = "order_item"

    id = Column(String(32), primary_key=True, default=generate_id)
    order_id = Column(
        String(32), ForeignKey("order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(String(32), ForeignKey("product.id"), nullable=False)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    shop_id = Column(String(32), ForeignKey("shop.id"), nullable=True)

    order = relationship("OrderModel", back_populates="items")


__all__ = [
    "CartItemModel",
    "OrderItemModel",
    "OrderModel",
    "ProductModel",
    "ShopModel",
]
