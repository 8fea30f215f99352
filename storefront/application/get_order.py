from typing import Optional, List

from storefront.domain.models import Order, OrderStatus
from storefront.domain.exceptions import OrderNotFoundError


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, user_id: Optional[str] = None) -> Order:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id, user_id=user_id)
            if not order:
                raise OrderNotFoundError(f"Заказ {order_id} не найден")
            return order


class ListOrdersUseCase:
    """Список заказов: пользователя или всех (для администратора)"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(
        self,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 10
    ) -> List[Order]:
        offset = (page - 1) * limit
        async with self._uow() as uow:
            return await uow.orders.list(user_id=user_id, status=status, limit=limit, offset=offset)
