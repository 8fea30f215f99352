import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.presentation.schemas import (
    CreateOrderRequest, OrderResponse, OrderListResponse, AdminOrderResponse,
    AdminOrderListResponse, UpdateOrderStatusRequest, MessageResponse, ErrorResponse
)
from storefront.presentation.dependencies import (
    get_unit_of_work, get_current_user_id, is_admin, require_admin
)
from storefront.application.place_order import (
    PlaceOrderUseCase, PlaceOrderDTO, LineItemDTO, ShippingAddressDTO
)
from storefront.application.get_order import GetOrderUseCase, ListOrdersUseCase
from storefront.application.update_order_status import UpdateOrderStatusUseCase
from storefront.domain.models import OrderStatus
from storefront.domain.exceptions import (
    ValidationFailedError, ProductNotFoundError, InsufficientStockError,
    TotalMismatchError, PersistenceError, OrderNotFoundError
)
from storefront.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


# Фабрики для создания use cases
def get_place_order_use_case(uow=Depends(get_unit_of_work)):
    return PlaceOrderUseCase(uow, settings.VAT_RATE, settings.PRICE_TOLERANCE, settings.DEFAULT_COUNTRY)


def get_get_order_use_case(uow=Depends(get_unit_of_work)):
    return GetOrderUseCase(uow)


def get_list_orders_use_case(uow=Depends(get_unit_of_work)):
    return ListOrdersUseCase(uow)


def get_update_order_status_use_case(uow=Depends(get_unit_of_work)):
    return UpdateOrderStatusUseCase(uow)


@router.post(
    "/orders",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def create_order(
    request: CreateOrderRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: PlaceOrderUseCase = Depends(get_place_order_use_case)
):
    """Оформить заказ"""
    try:
        dto = PlaceOrderDTO(
            user_id=user_id,
            items=[
                LineItemDTO(product_id=str(item.product_id), quantity=item.quantity)
                for item in request.items
            ],
            total=request.total,
            vat_amount=request.vat_amount,
            payment_method=request.payment_method.value,
            shipping_address=(
                ShippingAddressDTO(**request.shipping_address.model_dump())
                if request.shipping_address else None
            ),
            notes=request.notes
        )
        order = await use_case(dto)
        return OrderResponse.from_domain(order)

    except (ValidationFailedError, ProductNotFoundError, InsufficientStockError, TotalMismatchError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case)
):
    """Заказы текущего пользователя"""
    try:
        orders = await use_case(user_id=user_id, page=page, limit=limit)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
    return OrderListResponse(orders=[OrderResponse.from_domain(order) for order in orders])


@router.get(
    "/orders/admin/all",
    response_model=AdminOrderListResponse,
    dependencies=[Depends(require_admin)]
)
async def list_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case)
):
    """Все заказы (только администратор)"""
    try:
        orders = await use_case(status=order_status, page=page, limit=limit)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
    return AdminOrderListResponse(orders=[AdminOrderResponse.from_domain(order) for order in orders])


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    admin: bool = Depends(is_admin),
    use_case: GetOrderUseCase = Depends(get_get_order_use_case)
):
    """Получить заказ по ID, администратор видит любой заказ"""
    try:
        order = await use_case(order_id, user_id=None if admin else user_id)
        return OrderResponse.from_domain(order)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Заказ не найден")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch(
    "/orders/{order_id}/status",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)]
)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case)
):
    """Сменить статус заказа (только администратор)"""
    try:
        await use_case(order_id, request.status)
        return MessageResponse(message="Статус заказа обновлен")
    except ValidationFailedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Заказ не найден")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
