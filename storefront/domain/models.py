from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel

# Длина колонки user_id в хранилище
USER_ID_MAX_LENGTH = 36


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    MOBILE_MONEY = "mobile_money"
    CARD = "card"
    CASH = "cash"


class Category(BaseModel):
    """Domain Entity: категория каталога"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime


class Product(BaseModel):
    """Domain Entity: товар каталога"""
    id: str
    name: str
    description: str
    price: Decimal
    image: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    stock: int
    rating: Decimal = Decimal("0")
    reviews_count: int = 0
    created_at: datetime
    updated_at: datetime

    def has_stock(self, quantity: int) -> bool:
        """Бизнес-правило: остаток не может уйти в минус"""
        return self.stock >= quantity


class ShippingAddress(BaseModel):
    """Value Object: адрес доставки, неизменяем после создания"""
    id: str
    user_id: str
    street: str
    city: str
    district: str
    country: str
    created_at: Optional[datetime] = None


class OrderLine(BaseModel):
    """Позиция заказа. Цена фиксируется в момент оформления"""
    id: str
    order_id: str
    product_id: str
    quantity: int
    price: Decimal
    position: int = 0
    name: Optional[str] = None
    image: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """Domain Entity: заказ"""
    id: str
    user_id: str
    total: Decimal
    vat_amount: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    shipping_address_id: Optional[str] = None
    notes: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    items: list[OrderLine] = []
    created_at: datetime
    updated_at: datetime


class CartItem(BaseModel):
    """Позиция корзины пользователя"""
    id: str
    user_id: str
    product_id: str
    quantity: int
    product: Optional[Product] = None
    created_at: datetime
    updated_at: datetime
