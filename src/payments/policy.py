from enum import StrEnum
from decimal import Decimal
from typing import Mapping, Self
from types import MappingProxyType
from dataclasses import dataclass


class _CodeEnum(StrEnum):
    @classmethod
    def is_valid(cls, code: str | None) -> bool:
        return code is not None and code in cls

    @classmethod
    def from_code(cls, code: str | None) -> Self | None:
        if code is None:
            return None
        try:
            return cls(code.strip())
        except ValueError:
            return None


class Currency(_CodeEnum):
    EUR = 'EUR'
    USD = 'USD'


class PaymentType(_CodeEnum):
    TYPE1 = 'TYPE1'
    TYPE2 = 'TYPE2'
    TYPE3 = 'TYPE3'


@dataclass(frozen=True)
class PaymentPolicy:
    """Static per-type rules: which currencies a payment type accepts
    and how much its cancellation costs per elapsed hour."""

    allowed_currencies: Mapping[PaymentType, frozenset[Currency]]
    cancellation_fee_per_hour: Mapping[PaymentType, Decimal]
    fee_currency: Currency = Currency.EUR

    def is_currency_compatible(self, currency_code: str | None, payment_type_code: str | None) -> bool:
        currency = Currency.from_code(currency_code)
        payment_type = PaymentType.from_code(payment_type_code)

        if currency is None or payment_type is None:
            return False

        return currency in self.allowed_currencies.get(payment_type, frozenset())

    def fee_coefficient(self, payment_type_code: str) -> Decimal | None:
        return self.cancellation_fee_per_hour.get(payment_type_code)  # type: ignore[call-overload]


DEFAULT_POLICY = PaymentPolicy(
    allowed_currencies=MappingProxyType({
        PaymentType.TYPE1: frozenset({Currency.EUR}),
        PaymentType.TYPE2: frozenset({Currency.USD}),
        PaymentType.TYPE3: frozenset({Currency.EUR, Currency.USD}),
    }),
    cancellation_fee_per_hour=MappingProxyType({
        PaymentType.TYPE1: Decimal('0.05'),
        PaymentType.TYPE2: Decimal('0.10'),
        PaymentType.TYPE3: Decimal('0.15'),
    })
)


def get_payment_policy() -> PaymentPolicy:
    return DEFAULT_POLICY
