from abc import ABC, abstractmethod
from typing import Optional, List
from storefront.domain.models import (
    Order, OrderLine, OrderStatus, Product, Category, ShippingAddress, CartItem
)


class ProductRepository(ABC):
    @abstractmethod
    async def get_by_id(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_many_for_update(self, product_ids: set[str]) -> dict[str, Product]:
        """Пакетная выборка с блокировкой строк до конца транзакции"""
        pass

    @abstractmethod
    async def decrement_stock(self, product_id: str, amount: int) -> bool:
        """Условное списание: False, если остатка не хватило"""
        pass

    @abstractmethod
    async def list(self, category: Optional[str], limit: int, offset: int) -> List[Product]:
        pass

    @abstractmethod
    async def count(self, category: Optional[str]) -> int:
        pass

    @abstractmethod
    async def create(self, product: Product) -> None:
        pass

    @abstractmethod
    async def update(self, product_id: str, values: dict) -> None:
        pass

    @abstractmethod
    async def delete(self, product_id: str) -> bool:
        pass

    @abstractmethod
    async def count_in_category(self, category_id: str) -> int:
        pass


class CategoryRepository(ABC):
    @abstractmethod
    async def get_by_id(self, category_id: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def get_by_id_or_slug(self, key: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        pass

    @abstractmethod
    async def list(self) -> List[Category]:
        pass

    @abstractmethod
    async def create(self, category: Category) -> None:
        pass

    @abstractmethod
    async def update(self, category_id: str, values: dict) -> None:
        pass

    @abstractmethod
    async def delete(self, category_id: str) -> bool:
        pass


class AddressRepository(ABC):
    @abstractmethod
    async def create(self, address: ShippingAddress) -> None:
        pass


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str, user_id: Optional[str] = None) -> Optional[Order]:
        pass

    @abstractmethod
    async def list(
        self, user_id: Optional[str], status: Optional[OrderStatus], limit: int, offset: int
    ) -> List[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def add_line(self, line: OrderLine) -> None:
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus) -> bool:
        pass


class CartRepository(ABC):
    @abstractmethod
    async def list(self, user_id: str) -> List[CartItem]:
        pass

    @abstractmethod
    async def get(self, item_id: str, user_id: str) -> Optional[CartItem]:
        pass

    @abstractmethod
    async def get_by_product(self, user_id: str, product_id: str) -> Optional[CartItem]:
        pass

    @abstractmethod
    async def create(self, item: CartItem) -> None:
        pass

    @abstractmethod
    async def update_quantity(self, item_id: str, quantity: int) -> None:
        pass

    @abstractmethod
    async def delete(self, item_id: str, user_id: str) -> bool:
        pass

    @abstractmethod
    async def clear(self, user_id: str) -> None:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def products(self) -> ProductRepository:
        pass

    @property
    @abstractmethod
    def categories(self) -> CategoryRepository:
        pass

    @property
    @abstractmethod
    def addresses(self) -> AddressRepository:
        pass

    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        pass

    @property
    @abstractmethod
    def cart(self) -> CartRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
