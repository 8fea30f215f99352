class DomainException(Exception):
    pass


class ValidationFailedError(DomainException):
    pass


class ProductNotFoundError(DomainException):
    def __init__(self, missing_ids: list[str]):
        self.missing_ids = missing_ids
        super().__init__(f"Товары не найдены: {', '.join(missing_ids)}")


class InsufficientStockError(DomainException):
    def __init__(self, product_name: str, required: int, available: int | None = None):
        self.product_name = product_name
        self.required = required
        self.available = available
        if available is None:
            message = f"Недостаточно товара «{product_name}». Требуется: {required}"
        else:
            message = f"Недостаточно товара «{product_name}». Доступно: {available}, требуется: {required}"
        super().__init__(message)


class TotalMismatchError(DomainException):
    def __init__(self, expected_total, expected_vat, claimed_total, claimed_vat):
        self.expected_total = expected_total
        self.expected_vat = expected_vat
        self.claimed_total = claimed_total
        self.claimed_vat = claimed_vat
        super().__init__(
            f"Неверный расчет суммы заказа. Ожидалось: {expected_total} (НДС {expected_vat}), "
            f"получено: {claimed_total} (НДС {claimed_vat})"
        )


class PersistenceError(DomainException):
    pass


class OrderNotFoundError(DomainException):
    pass


class CategoryNotFoundError(DomainException):
    pass


class CartItemNotFoundError(DomainException):
    pass


class SlugAlreadyExistsError(DomainException):
    pass


class CategoryNotEmptyError(DomainException):
    pass


class EmptyPatchError(DomainException):
    pass
