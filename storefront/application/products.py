import logging
import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel

from storefront.domain.models import Product
from storefront.domain.exceptions import ProductNotFoundError, CategoryNotFoundError
from storefront.application.patch import Patch

logger = logging.getLogger(__name__)


class CreateProductDTO(BaseModel):
    name: str
    description: str
    price: Decimal
    image: Optional[str] = None
    category_id: str
    stock: int


class ProductPage(BaseModel):
    products: List[Product]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class ListProductsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, category: Optional[str] = None, page: int = 1, limit: int = 20) -> ProductPage:
        if category == "all":
            category = None
        async with self._uow() as uow:
            products = await uow.products.list(category=category, limit=limit, offset=(page - 1) * limit)
            total = await uow.products.count(category=category)
        return ProductPage(products=products, page=page, limit=limit, total=total)


class GetProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str) -> Product:
        async with self._uow() as uow:
            product = await uow.products.get_by_id(product_id)
        if not product:
            raise ProductNotFoundError([product_id])
        return product


class CreateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, data: CreateProductDTO) -> Product:
        now = datetime.now(timezone.utc)
        product = Product(
            id=str(uuid.uuid4()),
            name=data.name,
            description=data.description,
            price=data.price,
            image=data.image,
            category_id=data.category_id,
            stock=data.stock,
            created_at=now,
            updated_at=now
        )
        async with self._uow() as uow:
            if not await uow.categories.get_by_id(data.category_id):
                raise CategoryNotFoundError(f"Категория {data.category_id} не найдена")
            await uow.products.create(product)
            await uow.commit()
        logger.info(f"Товар создан: {product.id}")

        async with self._uow() as uow:
            return await uow.products.get_by_id(product.id)


class UpdateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str, patch: Patch) -> Product:
        values = patch.values()
        async with self._uow() as uow:
            if not await uow.products.get_by_id(product_id):
                raise ProductNotFoundError([product_id])
            if "category_id" in patch and not await uow.categories.get_by_id(patch.get("category_id")):
                raise CategoryNotFoundError(f"Категория {patch.get('category_id')} не найдена")
            await uow.products.update(product_id, values)
            await uow.commit()
        logger.info(f"Товар {product_id} обновлен: {sorted(values)}")

        async with self._uow() as uow:
            return await uow.products.get_by_id(product_id)


class DeleteProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str) -> None:
        async with self._uow() as uow:
            if not await uow.products.delete(product_id):
                raise ProductNotFoundError([product_id])
            await uow.commit()
        logger.info(f"Товар {product_id} удален")
