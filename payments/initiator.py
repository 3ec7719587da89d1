import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from django.conf import settings
import requests
from .exceptions import PaymentInitError, PaymentValidationError
from .models import FeeStatusEntry
from .paystack import PaystackConfigError, paystack_post

logger = logging.getLogger(__name__)

_REFERENCE_ALPHABET = string.ascii_lowercase + string.digits
_REFERENCE_SUFFIX_LEN = 9


@dataclass(frozen=True)
class PaymentRequest:
    public_key: str
    email: str
    amount: int
    currency: str
    reference: str
    metadata: dict
    channels: list = field(default_factory=list)

    def as_widget_config(self):
        """Options for PaystackPop.setup in the browser."""
        return {
            "key": self.public_key,
            "email": self.email,
            "amount": self.amount,
            "currency": self.currency,
            "ref": self.reference,
            "metadata": self.metadata,
            "channels": list(self.channels),
        }


def to_minor_units(amount) -> int:
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor) -> Decimal:
    return (Decimal(int(minor)) / 100).quantize(Decimal("0.01"))


def generate_reference(prefix=None, now=None) -> str:
    prefix = prefix or settings.PAYMENT_REFERENCE_PREFIX
    ts = int(now if now is not None else time.time())
    suffix = "".join(
        secrets.choice(_REFERENCE_ALPHABET) for _ in range(_REFERENCE_SUFFIX_LEN)
    )
    return f"{prefix}-{ts}-{suffix}"


def build_payment_request(payer, fee, *, payer_name=None) -> PaymentRequest:
    if not getattr(payer, "is_authenticated", False):
        raise PaymentValidationError("You must be signed in to pay a fee")
    if not payer.email:
        raise PaymentValidationError("Your account has no email address for the receipt")
    if fee is None:
        raise PaymentValidationError("Please select a fee to pay")
    if not fee.is_payable:
        raise PaymentValidationError(f"Fee {fee.name} is not open for payment")
    if FeeStatusEntry.objects.filter(
        payer=payer, fee=fee, status=FeeStatusEntry.STATUS_PAID
    ).exists():
        raise PaymentValidationError(f"Fee {fee.name} has already been paid")
    public_key = settings.PAYSTACK_PUBLIC_KEY
    if not public_key:
        logger.error("Paystack public key not configured; cannot start payment")
        raise PaymentInitError("Failed to initialize payment. Please try again.")

    name = payer_name if payer_name is not None else payer.get_display_name()
    metadata = {
        "student_id": str(payer.pk),
        "fee_id": str(fee.pk),
        "custom_fields": [
            {
                "display_name": "Student Name",
                "variable_name": "student_name",
                "value": name or "",
            },
            {
                "display_name": "Fee Type",
                "variable_name": "fee_type",
                "value": fee.name,
            },
            {
                "display_name": "Student ID",
                "variable_name": "student_id",
                "value": str(payer.pk),
            },
        ],
    }
    return PaymentRequest(
        public_key=public_key,
        email=payer.email,
        amount=to_minor_units(fee.amount),
        currency=settings.PAYMENT_CURRENCY,
        reference=generate_reference(),
        metadata=metadata,
        channels=list(settings.PAYMENT_CHANNELS),
    )


def initialize_hosted_checkout(payment_request: PaymentRequest, callback_url=None) -> dict:
    """
    Register the transaction with Paystack and return its hosted checkout
    details (authorization_url, access_code, reference).
    """
    payload = {
        "email": payment_request.email,
        "amount": payment_request.amount,
        "currency": payment_request.currency,
        "reference": payment_request.reference,
        "metadata": payment_request.metadata,
        "channels": list(payment_request.channels),
    }
    if callback_url:
        payload["callback_url"] = callback_url
    try:
        res = paystack_post("transaction/initialize", payload)
    except (PaystackConfigError, requests.RequestException, ValueError) as e:
        logger.error(
            "Payment initialization failed for %s: %s", payment_request.reference, e
        )
        raise PaymentInitError("Failed to initialize payment. Please try again.") from e
    if not isinstance(res, dict):
        res = {}
    data = res.get("data")
    if not res.get("status") or not isinstance(data, dict) or not data.get("authorization_url"):
        message = res.get("message") or ""
        logger.error(
            "Paystack refused initialization for %s: %s",
            payment_request.reference,
            message,
        )
        raise PaymentInitError(message or "Failed to initialize payment")
    return {
        "authorization_url": data["authorization_url"],
        "access_code": data.get("access_code", ""),
        "reference": data.get("reference") or payment_request.reference,
    }
