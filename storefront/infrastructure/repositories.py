from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.domain.models import (
    Order, OrderLine, OrderStatus, PaymentMethod, Product, Category, ShippingAddress, CartItem
)
from storefront.infrastructure.db_schema import (
    products_tbl, categories_tbl, addresses_tbl, orders_tbl, order_items_tbl, cart_items_tbl
)
from storefront.application.interfaces import (
    ProductRepository, CategoryRepository, AddressRepository, OrderRepository, CartRepository
)


def _product_from_row(row, prefix: str = "") -> Product:
    """Трансформация DB → Domain, prefix для колонок товара в JOIN"""
    data = row._mapping
    return Product(
        id=data[f"{prefix}id"],
        name=data[f"{prefix}name"],
        description=data[f"{prefix}description"],
        price=data[f"{prefix}price"],
        image=data[f"{prefix}image"],
        category_id=data[f"{prefix}category_id"],
        category_name=data.get("category_name"),
        stock=data[f"{prefix}stock"],
        rating=data[f"{prefix}rating"] or 0,
        reviews_count=data[f"{prefix}reviews_count"] or 0,
        created_at=data[f"{prefix}created_at"],
        updated_at=data[f"{prefix}updated_at"]
    )


class SQLAlchemyProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _with_category(self):
        return select(products_tbl, categories_tbl.c.name.label("category_name")).select_from(
            products_tbl.outerjoin(categories_tbl, products_tbl.c.category_id == categories_tbl.c.id)
        )

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        result = await self._session.execute(
            self._with_category().where(products_tbl.c.id == product_id)
        )
        row = result.fetchone()
        return _product_from_row(row) if row else None

    async def get_many_for_update(self, product_ids: set[str]) -> dict[str, Product]:
        # FOR UPDATE без JOIN: Postgres не блокирует nullable-сторону outer join
        result = await self._session.execute(
            select(products_tbl)
            .where(products_tbl.c.id.in_(list(product_ids)))
            .with_for_update()
        )
        return {row.id: _product_from_row(row) for row in result.fetchall()}

    async def decrement_stock(self, product_id: str, amount: int) -> bool:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id, products_tbl.c.stock >= amount)
            .values(
                stock=products_tbl.c.stock - amount,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def list(self, category: Optional[str], limit: int, offset: int) -> List[Product]:
        query = self._with_category()
        if category:
            query = query.where(categories_tbl.c.name == category)
        result = await self._session.execute(
            query.order_by(products_tbl.c.name.asc()).limit(limit).offset(offset)
        )
        return [_product_from_row(row) for row in result.fetchall()]

    async def count(self, category: Optional[str]) -> int:
        query = select(func.count()).select_from(
            products_tbl.outerjoin(categories_tbl, products_tbl.c.category_id == categories_tbl.c.id)
        )
        if category:
            query = query.where(categories_tbl.c.name == category)
        result = await self._session.execute(query)
        return result.scalar_one()

    async def create(self, product: Product) -> None:
        stmt = insert(products_tbl).values(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            image=product.image,
            category_id=product.category_id,
            stock=product.stock,
            rating=product.rating,
            reviews_count=product.reviews_count,
            created_at=product.created_at,
            updated_at=product.updated_at
        )
        await self._session.execute(stmt)

    async def update(self, product_id: str, values: dict) -> None:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id)
            .values(**values, updated_at=datetime.now(timezone.utc))
        )
        await self._session.execute(stmt)

    async def delete(self, product_id: str) -> bool:
        result = await self._session.execute(
            delete(products_tbl).where(products_tbl.c.id == product_id)
        )
        return result.rowcount > 0

    async def count_in_category(self, category_id: str) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(products_tbl).where(products_tbl.c.category_id == category_id)
        )
        return result.scalar_one()


class SQLAlchemyCategoryRepository(CategoryRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        result = await self._session.execute(
            select(categories_tbl).where(categories_tbl.c.id == category_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_by_id_or_slug(self, key: str) -> Optional[Category]:
        result = await self._session.execute(
            select(categories_tbl).where(or_(categories_tbl.c.id == key, categories_tbl.c.slug == key))
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = select(categories_tbl.c.id).where(categories_tbl.c.slug == slug)
        if exclude_id:
            query = query.where(categories_tbl.c.id != exclude_id)
        result = await self._session.execute(query)
        return result.fetchone() is not None

    async def list(self) -> List[Category]:
        result = await self._session.execute(
            select(categories_tbl).order_by(categories_tbl.c.name.asc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, category: Category) -> None:
        stmt = insert(categories_tbl).values(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            created_at=category.created_at
        )
        await self._session.execute(stmt)

    async def update(self, category_id: str, values: dict) -> None:
        await self._session.execute(
            update(categories_tbl).where(categories_tbl.c.id == category_id).values(**values)
        )

    async def delete(self, category_id: str) -> bool:
        result = await self._session.execute(
            delete(categories_tbl).where(categories_tbl.c.id == category_id)
        )
        return result.rowcount > 0

    def _to_domain(self, row) -> Category:
        return Category(
            id=row.id,
            name=row.name,
            slug=row.slug,
            description=row.description,
            created_at=row.created_at
        )


class SQLAlchemyAddressRepository(AddressRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, address: ShippingAddress) -> None:
        stmt = insert(addresses_tbl).values(
            id=address.id,
            user_id=address.user_id,
            street=address.street,
            city=address.city,
            district=address.district,
            country=address.country,
            created_at=address.created_at
        )
        await self._session.execute(stmt)


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _with_address(self):
        return select(
            orders_tbl,
            addresses_tbl.c.street,
            addresses_tbl.c.city,
            addresses_tbl.c.district,
            addresses_tbl.c.country,
            addresses_tbl.c.created_at.label("address_created_at")
        ).select_from(
            orders_tbl.outerjoin(addresses_tbl, orders_tbl.c.shipping_address_id == addresses_tbl.c.id)
        )

    async def get_by_id(self, order_id: str, user_id: Optional[str] = None) -> Optional[Order]:
        query = self._with_address().where(orders_tbl.c.id == order_id)
        if user_id is not None:
            query = query.where(orders_tbl.c.user_id == user_id)
        result = await self._session.execute(query)
        row = result.fetchone()
        if not row:
            return None
        lines = await self._load_lines([row.id])
        return self._to_domain(row, lines.get(row.id, []))

    async def list(
        self, user_id: Optional[str], status: Optional[OrderStatus], limit: int, offset: int
    ) -> List[Order]:
        query = self._with_address()
        if user_id is not None:
            query = query.where(orders_tbl.c.user_id == user_id)
        if status is not None:
            query = query.where(orders_tbl.c.status == status)
        result = await self._session.execute(
            query.order_by(orders_tbl.c.created_at.desc()).limit(limit).offset(offset)
        )
        rows = result.fetchall()
        lines = await self._load_lines([row.id for row in rows])
        return [self._to_domain(row, lines.get(row.id, [])) for row in rows]

    async def create(self, order: Order) -> None:
        stmt = insert(orders_tbl).values(
            id=order.id,
            user_id=order.user_id,
            total=order.total,
            vat_amount=order.vat_amount,
            status=order.status,
            payment_method=order.payment_method,
            shipping_address_id=order.shipping_address_id,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at
        )
        await self._session.execute(stmt)

    async def add_line(self, line: OrderLine) -> None:
        stmt = insert(order_items_tbl).values(
            id=line.id,
            order_id=line.order_id,
            product_id=line.product_id,
            position=line.position,
            quantity=line.quantity,
            price=line.price
        )
        await self._session.execute(stmt)

    async def update_status(self, order_id: str, status: OrderStatus) -> bool:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id)
            .values(
                status=status,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def _load_lines(self, order_ids: List[str]) -> dict[str, List[OrderLine]]:
        if not order_ids:
            return {}
        result = await self._session.execute(
            select(order_items_tbl, products_tbl.c.name, products_tbl.c.image)
            .join(products_tbl, order_items_tbl.c.product_id == products_tbl.c.id)
            .where(order_items_tbl.c.order_id.in_(order_ids))
            .order_by(order_items_tbl.c.position.asc())
        )
        lines: dict[str, List[OrderLine]] = {}
        for row in result.fetchall():
            lines.setdefault(row.order_id, []).append(OrderLine(
                id=row.id,
                order_id=row.order_id,
                product_id=row.product_id,
                quantity=row.quantity,
                price=row.price,
                position=row.position,
                name=row.name,
                image=row.image
            ))
        return lines

    def _to_domain(self, row, lines: List[OrderLine]) -> Order:
        """Трансформация DB → Domain"""
        address = None
        if row.shipping_address_id and row.street is not None:
            address = ShippingAddress(
                id=row.shipping_address_id,
                user_id=row.user_id,
                street=row.street,
                city=row.city,
                district=row.district,
                country=row.country,
                created_at=row.address_created_at
            )
        return Order(
            id=row.id,
            user_id=row.user_id,
            total=row.total,
            vat_amount=row.vat_amount,
            status=OrderStatus(row.status),
            payment_method=PaymentMethod(row.payment_method),
            shipping_address_id=row.shipping_address_id,
            notes=row.notes,
            shipping_address=address,
            items=lines,
            created_at=row.created_at,
            updated_at=row.updated_at
        )


class SQLAlchemyCartRepository(CartRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _with_product(self):
        product_columns = [column.label(f"p_{column.name}") for column in products_tbl.c]
        return select(cart_items_tbl, *product_columns).join(
            products_tbl, cart_items_tbl.c.product_id == products_tbl.c.id
        )

    async def list(self, user_id: str) -> List[CartItem]:
        result = await self._session.execute(
            self._with_product()
            .where(cart_items_tbl.c.user_id == user_id)
            .order_by(cart_items_tbl.c.created_at.desc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def get(self, item_id: str, user_id: str) -> Optional[CartItem]:
        result = await self._session.execute(
            self._with_product().where(cart_items_tbl.c.id == item_id, cart_items_tbl.c.user_id == user_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_by_product(self, user_id: str, product_id: str) -> Optional[CartItem]:
        result = await self._session.execute(
            self._with_product().where(
                cart_items_tbl.c.user_id == user_id, cart_items_tbl.c.product_id == product_id
            )
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(self, item: CartItem) -> None:
        stmt = insert(cart_items_tbl).values(
            id=item.id,
            user_id=item.user_id,
            product_id=item.product_id,
            quantity=item.quantity,
            created_at=item.created_at,
            updated_at=item.updated_at
        )
        await self._session.execute(stmt)

    async def update_quantity(self, item_id: str, quantity: int) -> None:
        stmt = (
            update(cart_items_tbl)
            .where(cart_items_tbl.c.id == item_id)
            .values(quantity=quantity, updated_at=datetime.now(timezone.utc))
        )
        await self._session.execute(stmt)

    async def delete(self, item_id: str, user_id: str) -> bool:
        result = await self._session.execute(
            delete(cart_items_tbl).where(cart_items_tbl.c.id == item_id, cart_items_tbl.c.user_id == user_id)
        )
        return result.rowcount > 0

    async def clear(self, user_id: str) -> None:
        await self._session.execute(
            delete(cart_items_tbl).where(cart_items_tbl.c.user_id == user_id)
        )

    def _to_domain(self, row) -> CartItem:
        return CartItem(
            id=row.id,
            user_id=row.user_id,
            product_id=row.product_id,
            quantity=row.quantity,
            product=_product_from_row(row, prefix="p_"),
            created_at=row.created_at,
            updated_at=row.updated_at
        )
