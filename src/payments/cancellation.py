from datetime import date, datetime
from decimal import Decimal
from dataclasses import dataclass

import tables
from .money import Money
from .policy import PaymentPolicy
from .errors import (
    PaymentValidationError,
    TYPE_MANDATORY,
    HOURS_CANNOT_BE_NEGATIVE,
    NO_DATA_FOR_PAYMENT_TYPE,
    SAME_DAY_CANCELLATION_ONLY,
    already_cancelled,
)


FEE_SCALE = Decimal('0.01')


@dataclass(frozen=True)
class CancellationEngine:
    policy: PaymentPolicy

    def prepare_payment_for_cancellation(
        self,
        payment: tables.Payment,
        cancellation_date: date,
        cancellation_time: datetime
    ):
        """Marks `payment` cancelled and charges the fee, or raises PaymentValidationError
        leaving the payment untouched.

        Cancelling is allowed once and only on the day the payment was created.
        The fee is the number of whole hours since creation times the hourly
        coefficient of the payment type.
        """
        if payment.cancelled:
            raise PaymentValidationError(already_cancelled(payment.id))

        if cancellation_date != payment.created_at.date():
            raise PaymentValidationError(SAME_DAY_CANCELLATION_ONLY)

        hours = elapsed_hours(payment.created_at, cancellation_time)
        fee = self.calculate_fee(payment.type, hours)

        payment.cancelled = True
        payment.cancellation_fee_amount = fee
        payment.cancellation_fee_currency = self.policy.fee_currency.value
        payment.cancellation_time = cancellation_time

    def calculate_fee(self, payment_type: str, hours: int) -> Decimal:
        if not payment_type:
            raise PaymentValidationError(TYPE_MANDATORY)
        if hours < 0:
            raise PaymentValidationError(HOURS_CANNOT_BE_NEGATIVE)

        coefficient = self.policy.fee_coefficient(payment_type)
        if coefficient is None:
            raise PaymentValidationError(NO_DATA_FOR_PAYMENT_TYPE + payment_type)

        return (Decimal(hours) * coefficient).quantize(FEE_SCALE)

    def fee_of(self, payment: tables.Payment) -> Money:
        fee = payment.cancellation_fee
        if fee is None:
            raise ValueError(f'payment {payment.id} has no cancellation fee')
        return Money(fee.amount, fee.currency)


def elapsed_hours(since: datetime, until: datetime) -> int:
    # Целые часы, дробная часть отбрасывается в сторону нуля
    return int((until - since).total_seconds() / 3600)
