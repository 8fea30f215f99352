from fastapi import APIRouter, Depends, HTTPException, status

from storefront.presentation.schemas import (
    CartResponse, AddCartItemRequest, UpdateCartItemRequest, MessageResponse, ErrorResponse
)
from storefront.presentation.dependencies import get_unit_of_work, get_current_user_id
from storefront.application.cart import (
    GetCartUseCase, AddCartItemUseCase, UpdateCartItemUseCase, RemoveCartItemUseCase, ClearCartUseCase
)
from storefront.domain.exceptions import (
    ProductNotFoundError, InsufficientStockError, CartItemNotFoundError, PersistenceError
)

router = APIRouter(prefix="/cart")


@router.get("", response_model=CartResponse)
async def get_cart(user_id: str = Depends(get_current_user_id), uow=Depends(get_unit_of_work)):
    """Корзина текущего пользователя"""
    try:
        cart = await GetCartUseCase(uow)(user_id)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
    return CartResponse.from_domain(cart)


@router.post(
    "/items",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def add_cart_item(
    request: AddCartItemRequest,
    user_id: str = Depends(get_current_user_id),
    uow=Depends(get_unit_of_work)
):
    try:
        await AddCartItemUseCase(uow)(user_id, str(request.product_id), request.quantity)
        return MessageResponse(message="Товар добавлен в корзину")
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put(
    "/items/{item_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_cart_item(
    item_id: str,
    request: UpdateCartItemRequest,
    user_id: str = Depends(get_current_user_id),
    uow=Depends(get_unit_of_work)
):
    try:
        await UpdateCartItemUseCase(uow)(user_id, item_id, request.quantity)
        return MessageResponse(message="Позиция корзины обновлена")
    except CartItemNotFoundError:
        raise HTTPException(status_code=404, detail="Позиция корзины не найдена")
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/items/{item_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def remove_cart_item(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    uow=Depends(get_unit_of_work)
):
    try:
        await RemoveCartItemUseCase(uow)(user_id, item_id)
        return MessageResponse(message="Товар удален из корзины")
    except CartItemNotFoundError:
        raise HTTPException(status_code=404, detail="Позиция корзины не найдена")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("", response_model=MessageResponse)
async def clear_cart(user_id: str = Depends(get_current_user_id), uow=Depends(get_unit_of_work)):
    try:
        await ClearCartUseCase(uow)(user_id)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
    return MessageResponse(message="Корзина очищена")
