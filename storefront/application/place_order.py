import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from storefront.domain.models import Order, OrderLine, OrderStatus, PaymentMethod, ShippingAddress
from storefront.domain.pricing import Pricing, to_decimal
from storefront.domain.exceptions import (
    ValidationFailedError, ProductNotFoundError, InsufficientStockError,
    TotalMismatchError, PersistenceError
)


logger = logging.getLogger(__name__)


class LineItemDTO(BaseModel):
    product_id: str
    quantity: int


class ShippingAddressDTO(BaseModel):
    street: str
    city: str
    district: str
    country: Optional[str] = None


class PlaceOrderDTO(BaseModel):
    user_id: str
    items: list[LineItemDTO]
    total: Decimal
    vat_amount: Decimal
    payment_method: str
    shipping_address: Optional[ShippingAddressDTO] = None
    notes: Optional[str] = None


class PlaceOrderUseCase:
    """Оформление заказа: проверка остатков и цен, списание и сохранение одной транзакцией"""

    def __init__(
        self,
        unit_of_work,
        vat_rate: Decimal,
        price_tolerance: Decimal,
        default_country: str
    ):
        self._uow = unit_of_work
        self._vat_rate = vat_rate
        self._tolerance = price_tolerance
        self._default_country = default_country

    async def __call__(self, order_data: PlaceOrderDTO) -> Order:
        payment_method = self._validate(order_data)
        logger.info(f"Оформление заказа для пользователя {order_data.user_id}, позиций: {len(order_data.items)}")

        now = datetime.now(timezone.utc)
        order_id = str(uuid.uuid4())

        async with self._uow() as uow:
            # 1. Пакетная выборка товаров с блокировкой строк
            requested_ids = {item.product_id for item in order_data.items}
            products = await uow.products.get_many_for_update(requested_ids)
            missing = sorted(requested_ids - products.keys())
            if missing:
                logger.warning(f"Товары не найдены: {missing}")
                raise ProductNotFoundError(missing)

            # 2. Проверка остатков по снимку из той же транзакции
            for item in order_data.items:
                product = products[item.product_id]
                if not product.has_stock(item.quantity):
                    logger.warning(f"Недостаточно товара {product.id}: {product.stock} < {item.quantity}")
                    raise InsufficientStockError(product.name, item.quantity, product.stock)

            # 3-4. Серверный расчет и сверка с суммой клиента
            pricing = Pricing.calculate(
                [(products[item.product_id].price, item.quantity) for item in order_data.items],
                self._vat_rate
            )
            if not pricing.matches(order_data.total, order_data.vat_amount, self._tolerance):
                logger.warning(
                    f"Сумма не совпала: ожидалось {pricing.total}/{pricing.vat_amount}, "
                    f"получено {order_data.total}/{order_data.vat_amount}"
                )
                raise TotalMismatchError(
                    pricing.total, pricing.vat_amount, order_data.total, order_data.vat_amount
                )
            pricing = pricing.rounded()

            # 5. Адрес, заказ, позиции и списание остатков
            shipping_address_id = None
            if order_data.shipping_address:
                address = ShippingAddress(
                    id=str(uuid.uuid4()),
                    user_id=order_data.user_id,
                    street=order_data.shipping_address.street,
                    city=order_data.shipping_address.city,
                    district=order_data.shipping_address.district,
                    country=order_data.shipping_address.country or self._default_country,
                    created_at=now
                )
                await uow.addresses.create(address)
                shipping_address_id = address.id

            order = Order(
                id=order_id,
                user_id=order_data.user_id,
                total=pricing.total,
                vat_amount=pricing.vat_amount,
                status=OrderStatus.PENDING,
                payment_method=payment_method,
                shipping_address_id=shipping_address_id,
                notes=(order_data.notes or "").strip() or None,
                created_at=now,
                updated_at=now
            )
            await uow.orders.create(order)

            for position, item in enumerate(order_data.items):
                product = products[item.product_id]
                await uow.orders.add_line(OrderLine(
                    id=str(uuid.uuid4()),
                    order_id=order_id,
                    product_id=product.id,
                    quantity=item.quantity,
                    price=product.price,
                    position=position
                ))
                if not await uow.products.decrement_stock(product.id, item.quantity):
                    logger.warning(f"Списание не прошло для товара {product.id}, заказ {order_id} откатывается")
                    raise InsufficientStockError(product.name, item.quantity)

            await uow.commit()
        logger.info(f"Заказ создан: {order_id}, сумма {pricing.total}")

        # 6. Перечитываем заказ целиком
        async with self._uow() as uow:
            created = await uow.orders.get_by_id(order_id)
        if created is None:
            raise PersistenceError(f"Заказ {order_id} не найден после сохранения")
        return created

    def _validate(self, order_data: PlaceOrderDTO) -> PaymentMethod:
        if not order_data.items:
            raise ValidationFailedError("Заказ должен содержать хотя бы одну позицию")
        for item in order_data.items:
            try:
                uuid.UUID(item.product_id)
            except ValueError:
                raise ValidationFailedError(f"Некорректный идентификатор товара: {item.product_id}")
            if item.quantity < 1:
                raise ValidationFailedError(f"Некорректное количество для товара {item.product_id}")
        if to_decimal(order_data.total) < 0 or to_decimal(order_data.vat_amount) < 0:
            raise ValidationFailedError("Сумма и НДС не могут быть отрицательными")
        try:
            payment_method = PaymentMethod(order_data.payment_method)
        except ValueError:
            raise ValidationFailedError(f"Неизвестный способ оплаты: {order_data.payment_method}")
        address = order_data.shipping_address
        if address and not all(value.strip() for value in (address.street, address.city, address.district)):
            raise ValidationFailedError("Адрес доставки заполнен не полностью")
        return payment_method
