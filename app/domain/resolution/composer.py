from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
from app.domain.exceptions import InvalidInput
from app.domain.resolution.records import MarkupRecord, MarkupType, RuleSource
from app.domain.resolution.resolver import ResolvedHospitality
from app.domain.resolution.scope import ScopeLevel

HUNDRED = Decimal("100")

# ISO 4217 exponents that differ from the usual two decimal places
_MINOR_UNIT_EXPONENTS: dict[str, int] = {
    "BIF": 0, "CLP": 0, "DJF": 0, "GNF": 0, "ISK": 0, "JPY": 0, "KMF": 0, "KRW": 0,
    "PYG": 0, "RWF": 0, "UGX": 0, "VND": 0, "VUV": 0, "XAF": 0, "XOF": 0, "XPF": 0,
    "BHD": 3, "IQD": 3, "JOD": 3, "KWD": 3, "LYD": 3, "OMR": 3, "TND": 3,
}


def minor_unit(currency: str) -> Decimal:
    exponent = _MINOR_UNIT_EXPONENTS.get(currency.upper(), 2)
    return Decimal(1).scaleb(-exponent)


def quantize_money(amount: Decimal, currency: str) -> Decimal:
    return amount.quantize(minor_unit(currency), rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class AppliedMarkup:
    type: MarkupType
    amount: Decimal
    level: ScopeLevel
    source: RuleSource
    rule_id: int | None


@dataclass(frozen=True)
class ComposedPrice:
    base_price: Decimal
    final_price: Decimal
    currency: str
    markup: AppliedMarkup | None = None


def compose_price(base_price: Decimal | int | str, currency: str, rule: MarkupRecord | None) -> ComposedPrice:
    base = to_decimal(base_price)
    if base < 0:
        raise InvalidInput("Base price must not be negative", ctx={"base_price": base})

    if rule is None:
        return ComposedPrice(base_price=base, final_price=base, currency=currency)

    if rule.markup_type is MarkupType.PERCENTAGE:
        # only the final value is rounded
        final = base * (1 + rule.markup_amount / HUNDRED)
    else:
        final = base + rule.markup_amount

    applied = AppliedMarkup(
        type=rule.markup_type,
        amount=rule.markup_amount,
        level=rule.level,
        source=rule.source,
        rule_id=rule.rule_id,
    )
    return ComposedPrice(
        base_price=base,
        final_price=quantize_money(final, currency),
        currency=currency,
        markup=applied
    )


def hospitality_subtotal(services: Iterable[ResolvedHospitality], quantity: int, currency: str = "USD") -> Decimal:
    if quantity < 1:
        raise InvalidInput("Quantity must be at least 1", ctx={"quantity": quantity})

    total = sum(
        (service.price * quantity for service in services if service.price is not None),
        Decimal("0")
    )
    return quantize_money(total, currency)
