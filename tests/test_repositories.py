"""Tests for the SQLAlchemy repositories and unit of work on SQLite."""

import asyncio
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.domain.exceptions import PersistenceError
from storefront.domain.models import CartItem, Order, OrderLine, OrderStatus, PaymentMethod
from storefront.infrastructure.db_schema import orders_tbl
from storefront.seed import PRODUCTS, seed


def make_order(user_id="user-1"):
    now = datetime.now(timezone.utc)
    return Order(
        id=str(uuid.uuid4()),
        user_id=user_id,
        total=Decimal("118.00"),
        vat_amount=Decimal("18.00"),
        status=OrderStatus.PENDING,
        payment_method=PaymentMethod.CARD,
        created_at=now,
        updated_at=now,
    )


def test_decrement_stock_is_conditional(sql_uow, catalog):
    product = catalog.add_product(price="100", stock=3)

    async def _run():
        async with sql_uow() as uow:
            first = await uow.products.decrement_stock(product.id, 2)
            second = await uow.products.decrement_stock(product.id, 2)
            await uow.commit()
        return first, second

    assert asyncio.run(_run()) == (True, False)
    assert catalog.get_product(product.id).stock == 1


def test_get_many_for_update_skips_missing(sql_uow, catalog):
    product = catalog.add_product(price="100", stock=3)
    missing_id = str(uuid.uuid4())

    async def _run():
        async with sql_uow() as uow:
            return await uow.products.get_many_for_update({product.id, missing_id})

    found = asyncio.run(_run())

    assert list(found) == [product.id]
    assert found[product.id].price == Decimal("100")


def test_order_lines_keep_position(sql_uow, catalog):
    first = catalog.add_product(name="Zebra Print", price="10", stock=3)
    second = catalog.add_product(name="Apple Crate", price="20", stock=3)
    order = make_order()

    async def _run():
        async with sql_uow() as uow:
            await uow.orders.create(order)
            for position, product in enumerate([first, second, first]):
                await uow.orders.add_line(OrderLine(
                    id=str(uuid.uuid4()), order_id=order.id, product_id=product.id,
                    quantity=1, price=product.price, position=position,
                ))
            await uow.commit()
        async with sql_uow() as uow:
            return await uow.orders.get_by_id(order.id)

    loaded = asyncio.run(_run())

    assert [line.name for line in loaded.items] == ["Zebra Print", "Apple Crate", "Zebra Print"]
    assert loaded.total == Decimal("118.00")
    assert loaded.shipping_address is None


def test_order_lookup_is_scoped_to_user(sql_uow):
    order = make_order(user_id="user-1")

    async def _run():
        async with sql_uow() as uow:
            await uow.orders.create(order)
            await uow.commit()
        async with sql_uow() as uow:
            return (
                await uow.orders.get_by_id(order.id, user_id="user-2"),
                await uow.orders.get_by_id(order.id),
            )

    hidden, visible = asyncio.run(_run())

    assert hidden is None
    assert visible.id == order.id


def test_update_status(sql_uow):
    order = make_order()

    async def _run():
        async with sql_uow() as uow:
            await uow.orders.create(order)
            await uow.commit()
        async with sql_uow() as uow:
            updated = await uow.orders.update_status(order.id, OrderStatus.DELIVERED)
            missing = await uow.orders.update_status(str(uuid.uuid4()), OrderStatus.DELIVERED)
            await uow.commit()
        async with sql_uow() as uow:
            return updated, missing, await uow.orders.get_by_id(order.id)

    updated, missing, loaded = asyncio.run(_run())

    assert (updated, missing) == (True, False)
    assert loaded.status == OrderStatus.DELIVERED


def test_changes_without_commit_are_discarded(sql_uow, catalog):
    product = catalog.add_product(price="100", stock=3)

    async def _run():
        async with sql_uow() as uow:
            await uow.orders.create(make_order())
            await uow.products.decrement_stock(product.id, 1)

    asyncio.run(_run())

    assert catalog.count_rows(orders_tbl) == 0
    assert catalog.get_product(product.id).stock == 3


def test_database_error_becomes_persistence_error(sql_uow, catalog):
    order = make_order()

    async def _run():
        async with sql_uow() as uow:
            await uow.orders.create(order)
            await uow.orders.create(order)
            await uow.commit()

    with pytest.raises(PersistenceError):
        asyncio.run(_run())

    assert catalog.count_rows(orders_tbl) == 0


def test_seed_is_idempotent(sql_uow, catalog):
    assert asyncio.run(seed(sql_uow)) == len(PRODUCTS)
    assert asyncio.run(seed(sql_uow)) == 0

    async def _run():
        async with sql_uow() as uow:
            return await uow.categories.list(), await uow.products.count(category="Electronics")

    categories, electronics = asyncio.run(_run())

    assert len(categories) == 5
    assert electronics == 3


def test_cart_rows_carry_product(sql_uow, catalog):
    product = catalog.add_product(name="USB Cable", price="2500.50", stock=10)
    now = datetime.now(timezone.utc)
    item = CartItem(
        id=str(uuid.uuid4()), user_id="user-1", product_id=product.id, quantity=2,
        created_at=now, updated_at=now,
    )

    async def _run():
        async with sql_uow() as uow:
            await uow.cart.create(item)
            await uow.commit()
        async with sql_uow() as uow:
            return (
                await uow.cart.list("user-1"),
                await uow.cart.get(item.id, "user-1"),
                await uow.cart.get_by_product("user-1", product.id),
            )

    listed, fetched, by_product = asyncio.run(_run())

    assert [cart_item.id for cart_item in listed] == [item.id]
    for loaded in (listed[0], fetched, by_product):
        assert loaded.product_id == product.id
        assert loaded.product.id == product.id
        assert loaded.product.name == "USB Cable"
        assert loaded.product.price == Decimal("2500.50")
        assert loaded.quantity == 2
