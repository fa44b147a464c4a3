from decimal import Decimal
from datetime import datetime
from typing import Callable
from dataclasses import dataclass

import tables
from .money import Money
from .errors import UnsupportedPaymentTypeError
from .policy import PaymentPolicy, PaymentType
from .schemas import PaymentBody
from .validation import validate_creation_request


# Масштаб колонки payment.amount, Numeric(19, 2)
AMOUNT_SCALE = Decimal('0.01')


@dataclass(frozen=True)
class PaymentVariant:
    payment_type: PaymentType
    populate: Callable[[tables.Payment, PaymentBody], None]


def _populate_details(payment: tables.Payment, body: PaymentBody):
    payment.details = body.details


def _populate_creditor_bank_bic(payment: tables.Payment, body: PaymentBody):
    payment.creditor_bank_bic = body.creditor_bank_bic


TYPE1 = PaymentVariant(PaymentType.TYPE1, _populate_details)
TYPE2 = PaymentVariant(PaymentType.TYPE2, _populate_details)
TYPE3 = PaymentVariant(PaymentType.TYPE3, _populate_creditor_bank_bic)


def variant_for(payment_type_code: str | None) -> PaymentVariant:
    match payment_type_code:
        case PaymentType.TYPE1:
            return TYPE1
        case PaymentType.TYPE2:
            return TYPE2
        case PaymentType.TYPE3:
            return TYPE3
        case _:
            # Тип должен быть проверен раньше, в PaymentService
            raise UnsupportedPaymentTypeError(payment_type_code)


def create_new_payment(body: PaymentBody, policy: PaymentPolicy, created_at: datetime) -> tables.Payment:
    variant = variant_for(body.type)
    validate_creation_request(body, policy)

    assert body.money is not None
    assert body.money.amount is not None
    money = Money(body.money.amount.quantize(AMOUNT_SCALE), body.money.currency)  # type: ignore[arg-type]

    payment = tables.Payment(
        type=variant.payment_type.value,
        amount=money.amount,
        currency=money.currency,
        debtor_iban=body.debtor_iban,
        creditor_iban=body.creditor_iban,
        created_at=created_at,
        cancelled=False
    )
    variant.populate(payment, body)
    return payment
