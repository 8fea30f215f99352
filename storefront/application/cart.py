import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List
from pydantic import BaseModel

from storefront.domain.models import CartItem
from storefront.domain.exceptions import (
    ProductNotFoundError, InsufficientStockError, CartItemNotFoundError
)

logger = logging.getLogger(__name__)


class Cart(BaseModel):
    items: List[CartItem]

    @property
    def total(self) -> Decimal:
        return sum((item.product.price * item.quantity for item in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class GetCartUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str) -> Cart:
        async with self._uow() as uow:
            return Cart(items=await uow.cart.list(user_id))


class AddCartItemUseCase:
    """Добавление в корзину, повторный товар суммируется с уже лежащим"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, product_id: str, quantity: int) -> None:
        async with self._uow() as uow:
            product = await uow.products.get_by_id(product_id)
            if not product:
                raise ProductNotFoundError([product_id])

            existing = await uow.cart.get_by_product(user_id, product_id)
            new_quantity = quantity + (existing.quantity if existing else 0)
            if not product.has_stock(new_quantity):
                raise InsufficientStockError(product.name, new_quantity, product.stock)

            if existing:
                await uow.cart.update_quantity(existing.id, new_quantity)
            else:
                now = datetime.now(timezone.utc)
                await uow.cart.create(CartItem(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    product_id=product_id,
                    quantity=quantity,
                    created_at=now,
                    updated_at=now
                ))
            await uow.commit()
        logger.info(f"Корзина {user_id}: товар {product_id}, количество {new_quantity}")


class UpdateCartItemUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, item_id: str, quantity: int) -> None:
        async with self._uow() as uow:
            item = await uow.cart.get(item_id, user_id)
            if not item:
                raise CartItemNotFoundError(f"Позиция корзины {item_id} не найдена")
            if not item.product.has_stock(quantity):
                raise InsufficientStockError(item.product.name, quantity, item.product.stock)
            await uow.cart.update_quantity(item_id, quantity)
            await uow.commit()


class RemoveCartItemUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str, item_id: str) -> None:
        async with self._uow() as uow:
            if not await uow.cart.delete(item_id, user_id):
                raise CartItemNotFoundError(f"Позиция корзины {item_id} не найдена")
            await uow.commit()


class ClearCartUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: str) -> None:
        async with self._uow() as uow:
            await uow.cart.clear(user_id)
            await uow.commit()
        logger.info(f"Корзина {user_id} очищена")
