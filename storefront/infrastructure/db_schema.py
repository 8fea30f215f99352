from sqlalchemy import (
    Table, Column, String, Integer, Numeric, Text, Enum, DateTime, ForeignKey, MetaData, UniqueConstraint
)
from sqlalchemy.sql import func

from storefront.domain.models import OrderStatus, PaymentMethod, USER_ID_MAX_LENGTH

metadata = MetaData()


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


categories_tbl = Table(
    "categories",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(100), nullable=False),
    Column("slug", String(100), unique=True, nullable=False, index=True),
    Column("description", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


products_tbl = Table(
    "products",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("image", String(500), nullable=True),
    Column("category_id", String(36), ForeignKey("categories.id"), nullable=True, index=True),
    Column("stock", Integer, nullable=False, default=0),
    Column("rating", Numeric(3, 2), nullable=False, default=0),
    Column("reviews_count", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)


addresses_tbl = Table(
    "addresses",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(USER_ID_MAX_LENGTH), nullable=False, index=True),
    Column("street", String(255), nullable=False),
    Column("city", String(100), nullable=False),
    Column("district", String(100), nullable=False),
    Column("country", String(100), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(USER_ID_MAX_LENGTH), nullable=False, index=True),
    Column("total", Numeric(12, 2), nullable=False),
    Column("vat_amount", Numeric(12, 2), nullable=False, default=0),
    Column(
        "status",
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True
    ),
    Column(
        "payment_method",
        Enum(PaymentMethod, name="payment_method", values_callable=_enum_values),
        nullable=False
    ),
    Column("shipping_address_id", String(36), ForeignKey("addresses.id"), nullable=True),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), index=True),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
)


order_items_tbl = Table(
    "order_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("order_id", String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("product_id", String(36), ForeignKey("products.id"), nullable=False, index=True),
    Column("position", Integer, nullable=False, default=0),
    Column("quantity", Integer, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


cart_items_tbl = Table(
    "cart_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(USER_ID_MAX_LENGTH), nullable=False, index=True),
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    UniqueConstraint("user_id", "product_id", name="uq_cart_user_product")
)
