import logging
from dataclasses import dataclass
from urllib.parse import quote
import requests
from .events import log_payment_event
from .models import PaymentEvent
from .paystack import PaystackConfigError, paystack_get

logger = logging.getLogger(__name__)

VERIFIED = "verified"
NOT_FOUND = "not_found"
NOT_SUCCESSFUL = "not_successful"
TIMEOUT = "timeout"
NETWORK_ERROR = "network_error"
BAD_RESPONSE = "bad_response"
REFERENCE_MISMATCH = "reference_mismatch"
NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class VerificationResult:
    reference: str
    verified: bool
    reason: str
    transaction: dict = None
    provider_status: str = ""

    @property
    def retryable(self):
        # the provider keeps the authoritative record, so asking again may help
        return self.reason in (TIMEOUT, NETWORK_ERROR, NOT_CONFIGURED)


def _unverified(reference, reason, detail="", transaction=None, provider_status=""):
    log_payment_event(
        PaymentEvent.KIND_VERIFICATION_FAILED,
        reference=reference,
        detail=f"{reason}: {detail}" if detail else reason,
        payload={"reason": reason, "provider_status": provider_status},
    )
    return VerificationResult(
        reference=reference,
        verified=False,
        reason=reason,
        transaction=transaction,
        provider_status=provider_status,
    )


def verify_payment(reference) -> VerificationResult:
    """
    Ask Paystack for the authoritative state of a transaction.

    Only a transaction whose status is "success" and whose reference matches
    comes back verified. Every other outcome, including network failures and
    timeouts, is a negative result with a reason; nothing is raised.
    """
    reference = (reference or "").strip()
    if not reference:
        return _unverified("", NOT_FOUND, "empty reference")
    try:
        res = paystack_get(f"transaction/verify/{quote(reference, safe='')}")
    except PaystackConfigError as e:
        return _unverified(reference, NOT_CONFIGURED, str(e))
    except requests.Timeout:
        logger.warning("Paystack verification timed out for %s", reference)
        return _unverified(reference, TIMEOUT)
    except requests.HTTPError as e:
        status_code = getattr(e.response, "status_code", None)
        if status_code in (400, 404):
            return _unverified(reference, NOT_FOUND, f"HTTP {status_code}")
        return _unverified(reference, NETWORK_ERROR, f"HTTP {status_code}")
    except requests.RequestException as e:
        logger.warning("Paystack verification request failed for %s: %s", reference, e)
        return _unverified(reference, NETWORK_ERROR, str(e))
    except ValueError:
        return _unverified(reference, BAD_RESPONSE, "response was not JSON")

    if not isinstance(res, dict):
        return _unverified(reference, BAD_RESPONSE, "unexpected response shape")
    if not res.get("status"):
        return _unverified(reference, NOT_FOUND, res.get("message") or "")
    data = res.get("data")
    if not isinstance(data, dict):
        return _unverified(reference, BAD_RESPONSE, "missing transaction data")
    provider_ref = data.get("reference")
    if provider_ref and provider_ref != reference:
        return _unverified(
            reference, REFERENCE_MISMATCH, f"provider returned {provider_ref}"
        )
    status = str(data.get("status") or "")
    if status != "success":
        return _unverified(
            reference,
            NOT_SUCCESSFUL,
            f"payment status {status or 'unknown'}",
            transaction=data,
            provider_status=status,
        )
    logger.info("Paystack verified transaction %s (%s)", reference, data.get("id"))
    return VerificationResult(
        reference=reference,
        verified=True,
        reason=VERIFIED,
        transaction=data,
        provider_status=status,
    )
