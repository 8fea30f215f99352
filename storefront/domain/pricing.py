from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
from pydantic import BaseModel

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # float -> str, чтобы не тащить двоичный хвост в сравнение
    return Decimal(str(value))


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class Pricing(BaseModel):
    """Серверный расчет суммы заказа по текущим ценам каталога"""
    subtotal: Decimal
    vat_amount: Decimal
    total: Decimal

    @classmethod
    def calculate(cls, lines: Iterable[tuple[Decimal, int]], vat_rate: Decimal) -> "Pricing":
        subtotal = sum((to_decimal(price) * quantity for price, quantity in lines), Decimal("0"))
        vat_amount = subtotal * vat_rate
        return cls(subtotal=subtotal, vat_amount=vat_amount, total=subtotal + vat_amount)

    def matches(self, claimed_total, claimed_vat, tolerance: Decimal) -> bool:
        """Бизнес-правило: сумма клиента лишь подсказка и должна совпасть с расчетом"""
        return (
            abs(self.total - to_decimal(claimed_total)) <= tolerance
            and abs(self.vat_amount - to_decimal(claimed_vat)) <= tolerance
        )

    def rounded(self) -> "Pricing":
        """Округление до копеек для сохранения, total = subtotal + НДС сохраняется"""
        subtotal = to_money(self.subtotal)
        vat_amount = to_money(self.vat_amount)
        return Pricing(subtotal=subtotal, vat_amount=vat_amount, total=subtotal + vat_amount)
