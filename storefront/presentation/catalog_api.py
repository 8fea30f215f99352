from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.presentation.schemas import (
    ProductResponse, ProductListResponse, PaginationResponse, CreateProductRequest,
    UpdateProductRequest, CategoryResponse, CategoryListResponse, CreateCategoryRequest,
    UpdateCategoryRequest, MessageResponse, ErrorResponse
)
from storefront.presentation.dependencies import get_unit_of_work, require_admin
from storefront.application.patch import Patch
from storefront.application.products import (
    ListProductsUseCase, GetProductUseCase, CreateProductUseCase, CreateProductDTO,
    UpdateProductUseCase, DeleteProductUseCase
)
from storefront.application.categories import (
    ListCategoriesUseCase, GetCategoryUseCase, CreateCategoryUseCase, CreateCategoryDTO,
    UpdateCategoryUseCase, DeleteCategoryUseCase
)
from storefront.domain.exceptions import (
    ProductNotFoundError, CategoryNotFoundError, SlugAlreadyExistsError,
    CategoryNotEmptyError, EmptyPatchError, PersistenceError
)

router = APIRouter()


# Товары

@router.get("/products", response_model=ProductListResponse)
async def list_products(
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    uow=Depends(get_unit_of_work)
):
    """Каталог с пагинацией и фильтром по категории"""
    try:
        result = await ListProductsUseCase(uow)(category=category, page=page, limit=limit)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
    return ProductListResponse(
        products=[ProductResponse.from_domain(product) for product in result.products],
        pagination=PaginationResponse(
            page=result.page, limit=result.limit, total=result.total, pages=result.pages
        )
    )


@router.get("/products/{product_id}", response_model=ProductResponse, responses={404: {"model": ErrorResponse}})
async def get_product(product_id: str, uow=Depends(get_unit_of_work)):
    try:
        product = await GetProductUseCase(uow)(product_id)
        return ProductResponse.from_domain(product)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/products",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)]
)
async def create_product(request: CreateProductRequest, uow=Depends(get_unit_of_work)):
    try:
        dto = CreateProductDTO(
            name=request.name,
            description=request.description,
            price=request.price,
            image=request.image,
            category_id=str(request.category_id),
            stock=request.stock
        )
        product = await CreateProductUseCase(uow)(dto)
        return ProductResponse.from_domain(product)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)]
)
async def update_product(product_id: str, request: UpdateProductRequest, uow=Depends(get_unit_of_work)):
    patch = Patch.from_model(request, nullable=("image",))
    if "category_id" in patch:
        patch.set("category_id", str(patch.get("category_id")))
    try:
        product = await UpdateProductUseCase(uow)(product_id, patch)
        return ProductResponse.from_domain(product)
    except EmptyPatchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete(
    "/products/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)]
)
async def delete_product(product_id: str, uow=Depends(get_unit_of_work)):
    try:
        await DeleteProductUseCase(uow)(product_id)
        return MessageResponse(message="Товар удален")
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except PersistenceError:
        # на товар ссылаются позиции заказов
        raise HTTPException(status_code=500, detail="Internal server error")


# Категории

@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(uow=Depends(get_unit_of_work)):
    try:
        categories = await ListCategoriesUseCase(uow)()
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
    return CategoryListResponse(categories=[CategoryResponse.from_domain(c) for c in categories])


@router.get("/categories/{key}", response_model=CategoryResponse, responses={404: {"model": ErrorResponse}})
async def get_category(key: str, uow=Depends(get_unit_of_work)):
    """Категория по id или slug"""
    try:
        return CategoryResponse.from_domain(await GetCategoryUseCase(uow)(key))
    except CategoryNotFoundError:
        raise HTTPException(status_code=404, detail="Категория не найдена")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/categories",
    response_model=CategoryResponse,
    responses={400: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)]
)
async def create_category(request: CreateCategoryRequest, uow=Depends(get_unit_of_work)):
    try:
        category = await CreateCategoryUseCase(uow)(CreateCategoryDTO(**request.model_dump()))
        return CategoryResponse.from_domain(category)
    except SlugAlreadyExistsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)]
)
async def update_category(category_id: str, request: UpdateCategoryRequest, uow=Depends(get_unit_of_work)):
    try:
        patch = Patch.from_model(request, nullable=("description",))
        category = await UpdateCategoryUseCase(uow)(category_id, patch)
        return CategoryResponse.from_domain(category)
    except (EmptyPatchError, SlugAlreadyExistsError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CategoryNotFoundError:
        raise HTTPException(status_code=404, detail="Категория не найдена")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete(
    "/categories/{category_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)]
)
async def delete_category(category_id: str, uow=Depends(get_unit_of_work)):
    try:
        await DeleteCategoryUseCase(uow)(category_id)
        return MessageResponse(message="Категория удалена")
    except CategoryNotEmptyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CategoryNotFoundError:
        raise HTTPException(status_code=404, detail="Категория не найдена")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Internal server error")
