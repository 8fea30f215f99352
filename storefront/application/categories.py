import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List
from pydantic import BaseModel

from storefront.domain.models import Category
from storefront.domain.exceptions import (
    CategoryNotFoundError, SlugAlreadyExistsError, CategoryNotEmptyError
)
from storefront.application.patch import Patch

logger = logging.getLogger(__name__)


class CreateCategoryDTO(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None


class ListCategoriesUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[Category]:
        async with self._uow() as uow:
            return await uow.categories.list()


class GetCategoryUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, key: str) -> Category:
        """Поиск по id или по slug"""
        async with self._uow() as uow:
            category = await uow.categories.get_by_id_or_slug(key)
        if not category:
            raise CategoryNotFoundError(f"Категория {key} не найдена")
        return category


class CreateCategoryUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, data: CreateCategoryDTO) -> Category:
        category = Category(
            id=str(uuid.uuid4()),
            name=data.name,
            slug=data.slug,
            description=data.description,
            created_at=datetime.now(timezone.utc)
        )
        async with self._uow() as uow:
            if await uow.categories.slug_taken(data.slug):
                raise SlugAlreadyExistsError(f"Slug {data.slug} уже занят")
            await uow.categories.create(category)
            await uow.commit()
        logger.info(f"Категория создана: {category.id} ({category.slug})")
        return category


class UpdateCategoryUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, category_id: str, patch: Patch) -> Category:
        values = patch.values()
        async with self._uow() as uow:
            if not await uow.categories.get_by_id(category_id):
                raise CategoryNotFoundError(f"Категория {category_id} не найдена")
            if "slug" in patch and await uow.categories.slug_taken(patch.get("slug"), exclude_id=category_id):
                raise SlugAlreadyExistsError(f"Slug {patch.get('slug')} уже занят")
            await uow.categories.update(category_id, values)
            await uow.commit()

        async with self._uow() as uow:
            return await uow.categories.get_by_id(category_id)


class DeleteCategoryUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, category_id: str) -> None:
        async with self._uow() as uow:
            if await uow.products.count_in_category(category_id) > 0:
                raise CategoryNotEmptyError("Нельзя удалить категорию, в которой есть товары")
            if not await uow.categories.delete(category_id):
                raise CategoryNotFoundError(f"Категория {category_id} не найдена")
            await uow.commit()
        logger.info(f"Категория {category_id} удалена")
