import logging

from storefront.domain.models import OrderStatus
from storefront.domain.exceptions import OrderNotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)


class UpdateOrderStatusUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, status: str) -> None:
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValidationFailedError(f"Неизвестный статус заказа: {status}")

        async with self._uow() as uow:
            updated = await uow.orders.update_status(order_id, new_status)
            if not updated:
                raise OrderNotFoundError(f"Заказ {order_id} не найден")
            await uow.commit()
        logger.info(f"Заказ {order_id} переведен в статус {new_status.value}")
