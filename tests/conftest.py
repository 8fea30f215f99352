"""Pytest fixtures for storefront tests."""

import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from storefront.config import settings
from storefront.database import create_tables
from storefront.domain.exceptions import PersistenceError
from storefront.domain.models import Category, Product
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.main import app
from storefront.presentation.dependencies import get_unit_of_work

ADMIN_TOKEN = "test-admin-token"


def make_product(name="Wireless Headphones", price="100000", stock=10, product_id=None, category_id=None):
    now = datetime.now(timezone.utc)
    return Product(
        id=product_id or str(uuid.uuid4()),
        name=name,
        description=f"{name} description",
        price=Decimal(price),
        category_id=category_id,
        stock=stock,
        created_at=now,
        updated_at=now,
    )


# In-memory unit of work

_MISSING = object()


class _State:
    def __init__(self):
        self.products = {}
        self.addresses = {}
        self.orders = {}
        self.lines = {}


class _FakeProducts:
    def __init__(self, tx):
        self._tx = tx

    async def get_by_id(self, product_id):
        await asyncio.sleep(0)
        return self._tx.state.products.get(product_id)

    async def get_many_for_update(self, product_ids):
        await self._tx.lock_rows(pid for pid in product_ids if pid in self._tx.state.products)
        products = self._tx.state.products
        return {pid: products[pid] for pid in product_ids if pid in products}

    async def decrement_stock(self, product_id, amount):
        await asyncio.sleep(0)
        self._tx.maybe_fail("decrement_stock")
        product = self._tx.state.products[product_id]
        if product.stock < amount:
            return False
        self._tx.write(self._tx.state.products, product_id, product.model_copy(update={"stock": product.stock - amount}))
        return True


class _FakeAddresses:
    def __init__(self, tx):
        self._tx = tx

    async def create(self, address):
        self._tx.maybe_fail("create_address")
        self._tx.write(self._tx.state.addresses, address.id, address)


class _FakeOrders:
    def __init__(self, tx):
        self._tx = tx

    async def create(self, order):
        await asyncio.sleep(0)
        self._tx.maybe_fail("create_order")
        self._tx.write(self._tx.state.orders, order.id, order)
        self._tx.write(self._tx.state.lines, order.id, [])

    async def add_line(self, line):
        await asyncio.sleep(0)
        self._tx.maybe_fail("add_line")
        lines = self._tx.state.lines
        self._tx.write(lines, line.order_id, lines[line.order_id] + [line])

    async def get_by_id(self, order_id, user_id=None):
        state = self._tx.state
        order = state.orders.get(order_id)
        if order is None or (user_id is not None and order.user_id != user_id):
            return None
        lines = [
            line.model_copy(update={
                "name": state.products[line.product_id].name,
                "image": state.products[line.product_id].image,
            })
            for line in sorted(state.lines[order_id], key=lambda line: line.position)
        ]
        return order.model_copy(update={
            "items": lines,
            "shipping_address": state.addresses.get(order.shipping_address_id),
        })


class _FakeTransaction:
    """Пишет сразу в общее состояние, откат по журналу; блокировки строк до конца транзакции"""

    def __init__(self, store):
        self._store = store
        self.state = store.state
        self.committed = False
        self._undo = []
        self._held = {}
        self.products = _FakeProducts(self)
        self.addresses = _FakeAddresses(self)
        self.orders = _FakeOrders(self)

    def maybe_fail(self, operation):
        self._store.maybe_fail(operation)

    def write(self, table, key, value):
        self._undo.append((table, key, table.get(key, _MISSING)))
        table[key] = value

    async def lock_rows(self, keys):
        # единый порядок захвата, как у SELECT ... FOR UPDATE по id
        for key in sorted(set(keys)):
            if key not in self._held:
                lock = self._store.row_lock(key)
                await lock.acquire()
                self._held[key] = lock

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.committed = False

    def finish(self):
        if not self.committed:
            for table, key, previous in reversed(self._undo):
                if previous is _MISSING:
                    table.pop(key, None)
                else:
                    table[key] = previous
        for lock in self._held.values():
            lock.release()
        self._held = {}


class FakeUnitOfWork:
    def __init__(self):
        self.state = _State()
        self.fail_on = None
        self.commits = 0
        self._row_locks = {}
        self._loop = None

    def maybe_fail(self, operation):
        if self.fail_on == operation:
            raise PersistenceError(f"simulated failure in {operation}")

    def add_product(self, product):
        self.state.products[product.id] = product
        return product

    def row_lock(self, key):
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._loop = loop
            self._row_locks = {}
        return self._row_locks.setdefault(key, asyncio.Lock())

    @asynccontextmanager
    async def __call__(self):
        tx = _FakeTransaction(self)
        try:
            yield tx
        finally:
            if tx.committed:
                self.commits += 1
            tx.finish()


@pytest.fixture
def fake_uow():
    return FakeUnitOfWork()


# SQLite-backed store

@pytest.fixture
def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}", poolclass=NullPool)
    asyncio.run(create_tables(engine))
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def sql_uow(session_factory):
    return UnitOfWork(session_factory)


class Catalog:
    """Helpers for seeding and inspecting the SQLite store."""

    def __init__(self, uow):
        self._uow = uow

    def add_category(self, name="Electronics", slug="electronics"):
        category = Category(
            id=str(uuid.uuid4()), name=name, slug=slug, description=None,
            created_at=datetime.now(timezone.utc),
        )

        async def _run():
            async with self._uow() as uow:
                await uow.categories.create(category)
                await uow.commit()

        asyncio.run(_run())
        return category

    def add_product(self, **kwargs):
        product = make_product(**kwargs)

        async def _run():
            async with self._uow() as uow:
                await uow.products.create(product)
                await uow.commit()

        asyncio.run(_run())
        return product

    def get_product(self, product_id):
        async def _run():
            async with self._uow() as uow:
                return await uow.products.get_by_id(product_id)

        return asyncio.run(_run())

    def count_rows(self, table):
        async def _run():
            async with self._uow() as uow:
                result = await uow._session.execute(select(func.count()).select_from(table))
                return result.scalar_one()

        return asyncio.run(_run())


@pytest.fixture
def catalog(sql_uow):
    return Catalog(sql_uow)


@pytest.fixture
def client(sql_uow, monkeypatch):
    monkeypatch.setattr(settings, "API_TOKEN", ADMIN_TOKEN)
    app.dependency_overrides[get_unit_of_work] = lambda: sql_uow
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client(tmp_path):
    """Клиент поверх базы без таблиц: любая операция хранилища падает"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}", poolclass=NullPool)
    broken = UnitOfWork(async_sessionmaker(engine, expire_on_commit=False))
    app.dependency_overrides[get_unit_of_work] = lambda: broken
    yield TestClient(app)
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


@pytest.fixture
def admin_headers():
    return {"X-API-Key": ADMIN_TOKEN}


@pytest.fixture
def user_headers():
    return {"X-User-Id": "user-1"}
