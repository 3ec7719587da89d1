class PaymentError(Exception):
    """Base class for fee payment failures."""


class PaymentValidationError(PaymentError):
    """The payer or fee cannot start a payment (no retry)."""


class PaymentInitError(PaymentError):
    """The provider checkout could not be set up; nothing was recorded."""


class SettlementError(PaymentError):
    retryable = False


class StoreUnavailable(SettlementError):
    retryable = True


class MalformedProviderData(SettlementError):
    """Verified provider data failed validation; an operator must look at it."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}
