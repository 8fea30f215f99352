import asyncio
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from storefront.database import AsyncSessionLocal, create_tables, engine
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.domain.models import Category, Product

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

CATEGORIES = [
    ("Electronics", "electronics", "Latest electronic devices and gadgets"),
    ("Clothing", "clothing", "Fashion and apparel for all"),
    ("Home & Garden", "home-garden", "Everything for your home and garden"),
    ("Sports", "sports", "Sports equipment and accessories"),
    ("Books", "books", "Books and educational materials"),
]

# (название, описание, цена, slug категории, остаток)
PRODUCTS = [
    ("Wireless Bluetooth Headphones", "Wireless headphones with noise cancellation.", "750000", "electronics", 50),
    ("Smart Watch Series X", "Fitness tracking and smartphone integration.", "1100000", "electronics", 30),
    ("Premium Cotton T-Shirt", "Breathable cotton t-shirt.", "110000", "clothing", 100),
    ("Leather Messenger Bag", "Handcrafted genuine leather bag.", "550000", "clothing", 25),
    ("Coffee Maker Deluxe", "Programmable coffee maker with built-in grinder.", "660000", "home-garden", 40),
    ("Yoga Mat Pro", "Non-slip eco-friendly yoga mat.", "220000", "sports", 75),
    ("Programming Fundamentals Book", "Guide to programming concepts.", "145000", "books", 60),
    ("4K Webcam", "Ultra HD webcam with built-in microphone.", "480000", "electronics", 35),
]


async def seed(unit_of_work: UnitOfWork) -> int:
    """Заполняет пустой каталог демонстрационными данными. Возвращает число созданных товаров"""
    now = datetime.now(timezone.utc)
    created = 0
    async with unit_of_work() as uow:
        category_ids = {}
        for name, slug, description in CATEGORIES:
            existing = await uow.categories.get_by_id_or_slug(slug)
            if existing:
                category_ids[slug] = existing.id
                continue
            category = Category(id=str(uuid.uuid4()), name=name, slug=slug, description=description, created_at=now)
            await uow.categories.create(category)
            category_ids[slug] = category.id

        if await uow.products.count(category=None) > 0:
            logger.info("Каталог уже заполнен, товары не добавляются")
        else:
            for name, description, price, slug, stock in PRODUCTS:
                await uow.products.create(Product(
                    id=str(uuid.uuid4()),
                    name=name,
                    description=description,
                    price=Decimal(price),
                    category_id=category_ids[slug],
                    stock=stock,
                    created_at=now,
                    updated_at=now
                ))
                created += 1
        await uow.commit()
    logger.info(f"Добавлено товаров: {created}")
    return created


async def main():
    await create_tables()
    await seed(UnitOfWork(AsyncSessionLocal))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
