from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from storefront.domain.models import OrderStatus, PaymentMethod


class CamelModel(BaseModel):
    """На проводе camelCase, внутри snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Заказы

class LineItemRequest(CamelModel):
    product_id: UUID
    quantity: int = Field(ge=1)


class ShippingAddressRequest(CamelModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    district: str = Field(min_length=1)
    country: Optional[str] = None


class CreateOrderRequest(CamelModel):
    items: List[LineItemRequest] = Field(min_length=1)
    total: Decimal = Field(ge=0)
    vat_amount: Decimal = Field(ge=0)
    payment_method: PaymentMethod
    shipping_address: Optional[ShippingAddressRequest] = None
    notes: Optional[str] = None


class ShippingAddressResponse(CamelModel):
    street: str
    city: str
    district: str
    country: str


class OrderLineResponse(CamelModel):
    id: str
    product_id: str
    name: Optional[str] = None
    image: Optional[str] = None
    quantity: int
    price: float


class OrderResponse(CamelModel):
    id: str
    total: float
    vat_amount: float
    status: OrderStatus
    payment_method: PaymentMethod
    notes: Optional[str] = None
    shipping_address: Optional[ShippingAddressResponse] = None
    items: List[OrderLineResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order):
        address = None
        if order.shipping_address:
            address = ShippingAddressResponse(
                street=order.shipping_address.street,
                city=order.shipping_address.city,
                district=order.shipping_address.district,
                country=order.shipping_address.country
            )
        return cls(
            id=order.id,
            total=float(order.total),
            vat_amount=float(order.vat_amount),
            status=order.status,
            payment_method=order.payment_method,
            notes=order.notes,
            shipping_address=address,
            items=[
                OrderLineResponse(
                    id=line.id,
                    product_id=line.product_id,
                    name=line.name,
                    image=line.image,
                    quantity=line.quantity,
                    price=float(line.price)
                )
                for line in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at
        )


class AdminOrderResponse(OrderResponse):
    user_id: str

    @classmethod
    def from_domain(cls, order):
        return cls(**OrderResponse.from_domain(order).model_dump(), user_id=order.user_id)


class OrderListResponse(CamelModel):
    orders: List[OrderResponse]


class AdminOrderListResponse(CamelModel):
    orders: List[AdminOrderResponse]


class UpdateOrderStatusRequest(CamelModel):
    status: str


# Каталог

class ProductResponse(CamelModel):
    id: str
    name: str
    description: str
    price: float
    image: Optional[str] = None
    category_id: Optional[str] = None
    category: Optional[str] = None
    stock: int
    rating: float
    reviews: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, product):
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=float(product.price),
            image=product.image,
            category_id=product.category_id,
            category=product.category_name,
            stock=product.stock,
            rating=float(product.rating),
            reviews=product.reviews_count,
            created_at=product.created_at,
            updated_at=product.updated_at
        )


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class ProductListResponse(CamelModel):
    products: List[ProductResponse]
    pagination: PaginationResponse


class CreateProductRequest(CamelModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    image: Optional[str] = None
    category_id: UUID
    stock: int = Field(ge=0)


class UpdateProductRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0)
    image: Optional[str] = None
    category_id: Optional[UUID] = None
    stock: Optional[int] = Field(default=None, ge=0)


class CategoryResponse(CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, category):
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            created_at=category.created_at
        )


class CategoryListResponse(CamelModel):
    categories: List[CategoryResponse]


class CreateCategoryRequest(CamelModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None


class UpdateCategoryRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None


# Корзина

class AddCartItemRequest(CamelModel):
    product_id: UUID
    quantity: int = Field(ge=1)


class UpdateCartItemRequest(CamelModel):
    quantity: int = Field(ge=1)


class CartProductResponse(CamelModel):
    id: str
    name: str
    description: str
    price: float
    image: Optional[str] = None
    stock: int


class CartItemResponse(CamelModel):
    id: str
    product: CartProductResponse
    quantity: int
    created_at: datetime
    updated_at: datetime


class CartResponse(CamelModel):
    items: List[CartItemResponse]
    total: float
    item_count: int

    @classmethod
    def from_domain(cls, cart):
        return cls(
            items=[
                CartItemResponse(
                    id=item.id,
                    product=CartProductResponse(
                        id=item.product.id,
                        name=item.product.name,
                        description=item.product.description,
                        price=float(item.product.price),
                        image=item.product.image,
                        stock=item.product.stock
                    ),
                    quantity=item.quantity,
                    created_at=item.created_at,
                    updated_at=item.updated_at
                )
                for item in cart.items
            ],
            total=float(cart.total),
            item_count=cart.item_count
        )


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
