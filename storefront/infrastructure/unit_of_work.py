import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.domain.exceptions import PersistenceError
from storefront.infrastructure.repositories import (
    SQLAlchemyProductRepository,
    SQLAlchemyCategoryRepository,
    SQLAlchemyAddressRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyCartRepository
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        async with self._session_factory() as session:
            try:
                uow_impl = _UnitOfWorkImpl(session)
                yield uow_impl
                # Если commit не вызван, то rollback
                await session.rollback()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Ошибка хранилища, транзакция откатена: {e}")
                raise PersistenceError("Ошибка хранилища") from e
            except Exception:
                await session.rollback()
                raise


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.products = SQLAlchemyProductRepository(session)
        self.categories = SQLAlchemyCategoryRepository(session)
        self.addresses = SQLAlchemyAddressRepository(session)
        self.orders = SQLAlchemyOrderRepository(session)
        self.cart = SQLAlchemyCartRepository(session)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
