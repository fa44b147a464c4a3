from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class MoneyBody(BaseModel):
    amount: Decimal | None = None
    currency: str | None = None


class PaymentBody(BaseModel):
    # Все поля необязательные: обязательность проверяется в payments.validation,
    # чтобы клиент получил понятное сообщение вместо 422
    type: str | None = None
    money: MoneyBody | None = None
    debtor_iban: str | None = None
    creditor_iban: str | None = None
    details: str | None = Field(default=None, description='Обязательно для TYPE1')
    creditor_bank_bic: str | None = Field(default=None, description='Обязательно для TYPE3')


class MoneyInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    amount: Decimal
    currency: str


class PaymentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    money: MoneyInfo
    debtor_iban: str
    creditor_iban: str
    details: str | None = None
    creditor_bank_bic: str | None = None
    created_at: datetime
    cancelled: bool
    notification_status: str | None = None


class CreatePaymentResult(BaseModel):
    validation_errors: list[str] = Field(default_factory=list)
    payment: PaymentInfo | None = None


class CancelPaymentResult(BaseModel):
    validation_errors: list[str] = Field(default_factory=list)
    message: str | None = None
    payment: PaymentInfo | None = None
    cancellation_fee: MoneyInfo | None = None


class NotCancelledPaymentsQuery(BaseModel):
    filter: bool = False
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None


class PaymentCancellationInfo(BaseModel):
    id: int
    cancellation_fee: MoneyInfo | None = None
