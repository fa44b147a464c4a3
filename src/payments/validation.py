from decimal import Decimal

from .errors import (
    PaymentValidationError,
    TYPE_MANDATORY,
    UNSUPPORTED_TYPE,
    MONEY_MISSING,
    AMOUNT_MANDATORY,
    INCORRECT_AMOUNT_VALUE,
    CURRENCY_MANDATORY,
    CURRENCY_NOT_SUPPORTED,
    TYPE_NOT_COMPATIBLE_WITH_CURRENCY,
    DEBTOR_IBAN_MANDATORY,
    CREDITOR_IBAN_MANDATORY,
    DETAILS_MANDATORY_FOR_TYPE1,
    CREDITOR_BANK_BIC_MANDATORY_FOR_TYPE3,
)
from .policy import Currency, PaymentPolicy, PaymentType
from .schemas import PaymentBody


def validate_creation_request(body: PaymentBody, policy: PaymentPolicy):
    """Raises PaymentValidationError describing the first problem found.

    Checks go in a fixed order: type, money, amount, currency, IBANs and
    then whatever the payment type requires on top of that.
    """
    validate_common_fields(body, policy)
    validate_type_specific_requirements(body)


def validate_type_specific_requirements(body: PaymentBody):
    match body.type:
        case PaymentType.TYPE1:
            validate_type1_details(body)
        case PaymentType.TYPE2:
            # Валюта уже проверена, details необязательны
            pass
        case PaymentType.TYPE3:
            validate_type3_creditor_bank_bic(body)
        case _:
            raise PaymentValidationError(UNSUPPORTED_TYPE + str(body.type))


def validate_common_fields(body: PaymentBody, policy: PaymentPolicy):
    validate_payment_type(body)
    validate_amount(body)
    validate_currency(body, policy)
    validate_ibans(body)


def validate_payment_type(body: PaymentBody):
    if not body.type:
        raise PaymentValidationError(TYPE_MANDATORY)
    if not PaymentType.is_valid(body.type):
        raise PaymentValidationError(UNSUPPORTED_TYPE + body.type)


def validate_amount(body: PaymentBody):
    if body.money is None:
        raise PaymentValidationError(MONEY_MISSING)

    amount = body.money.amount
    if amount is None or not amount > Decimal(0):
        raise PaymentValidationError(AMOUNT_MANDATORY)
    if _decimal_places(amount) > 2:
        raise PaymentValidationError(INCORRECT_AMOUNT_VALUE)


def validate_currency(body: PaymentBody, policy: PaymentPolicy):
    assert body.money is not None
    currency = body.money.currency

    if not currency:
        raise PaymentValidationError(CURRENCY_MANDATORY)
    if not Currency.is_valid(currency):
        raise PaymentValidationError(CURRENCY_NOT_SUPPORTED + currency)
    if not policy.is_currency_compatible(currency, body.type):
        raise PaymentValidationError(f'{body.type}{TYPE_NOT_COMPATIBLE_WITH_CURRENCY}{currency}')


def validate_ibans(body: PaymentBody):
    if not body.debtor_iban:
        raise PaymentValidationError(DEBTOR_IBAN_MANDATORY)
    if not body.creditor_iban:
        raise PaymentValidationError(CREDITOR_IBAN_MANDATORY)


def validate_type1_details(body: PaymentBody):
    if _is_blank(body.details):
        raise PaymentValidationError(DETAILS_MANDATORY_FOR_TYPE1)


def validate_type3_creditor_bank_bic(body: PaymentBody):
    if _is_blank(body.creditor_bank_bic):
        raise PaymentValidationError(CREDITOR_BANK_BIC_MANDATORY_FOR_TYPE3)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _decimal_places(amount: Decimal) -> int:
    exponent = amount.as_tuple().exponent
    assert isinstance(exponent, int)
    return max(0, -exponent)
