CREATION_REQUEST_NULL = 'Payment creation request cannot be null'
UNSUPPORTED_TYPE = 'Unsupported payment type: '
CURRENCY_NOT_SUPPORTED = 'Unsupported currency code: '

TYPE_MANDATORY = 'Type is required'
AMOUNT_MANDATORY = 'Amount is required and must be more than 0'
INCORRECT_AMOUNT_VALUE = 'Please provide an amount with no more than 2 decimal places'
CURRENCY_MANDATORY = 'Currency is required'
MONEY_MISSING = 'Please check your request structure, currency and amount should go as money'
DEBTOR_IBAN_MANDATORY = 'Debtor IBAN is required'
CREDITOR_IBAN_MANDATORY = 'Creditor IBAN is required'

TYPE_NOT_COMPATIBLE_WITH_CURRENCY = ' payment is not allowed to be used with currency '
DETAILS_MANDATORY_FOR_TYPE1 = 'TYPE1 payment requires details to be provided'
CREDITOR_BANK_BIC_MANDATORY_FOR_TYPE3 = 'TYPE3 payment requires creditor bank BIC to be provided'

SAME_DAY_CANCELLATION_ONLY = 'Payment can be cancelled only on the day of its creation'
NO_DATA_FOR_PAYMENT_TYPE = 'No data found for payment type: '
HOURS_CANNOT_BE_NEGATIVE = 'Hours cannot be negative'
PAYMENT_DOES_NOT_EXIST = 'Provided payment id does not exist'


def already_cancelled(payment_id: int | None) -> str:
    return f'Payment with id {payment_id} is already canceled'


def cancelled_with_fee(payment_id: int, fee: object) -> str:
    return f'Payment with id {payment_id} was successfully cancelled. Cancellation fee is: {fee}'


class PaymentValidationError(Exception):
    """Request can't be fulfilled; the message goes back to the client as is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PaymentDoesntExistError(PaymentValidationError):
    def __init__(self):
        super().__init__(PAYMENT_DOES_NOT_EXIST)


class UnsupportedPaymentTypeError(Exception):
    """An unknown type code got past request validation."""
