import hashlib
import hmac
import logging
import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class PaystackConfigError(Exception):
    pass


def _headers():
    secret = settings.PAYSTACK_SECRET_KEY
    if not secret:
        # Configuration missing; surface a clear error for callers
        logger.error("Paystack secret key not configured")
        raise PaystackConfigError("Paystack secret key is not configured")
    return {
        "Authorization": f"Bearer {secret}",
        "Accept": "application/json",
    }


def _url(path):
    return f"{settings.PAYSTACK_BASE_URL}/{path.lstrip('/')}"


def paystack_get(path, params=None):
    url = _url(path)
    try:
        r = requests.get(
            url,
            headers=_headers(),
            params=params,
            timeout=settings.PAYSTACK_TIMEOUT_SECONDS,
        )
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        body = e.response.text if e.response is not None else ""
        logger.error(
            "Paystack GET %s failed: %s %s",
            url,
            getattr(e.response, "status_code", ""),
            body[:500],
        )
        raise


def paystack_post(path, payload: dict):
    url = _url(path)
    headers = {**_headers(), "Content-Type": "application/json"}
    try:
        r = requests.post(
            url,
            headers=headers,
            json=payload,
            timeout=settings.PAYSTACK_TIMEOUT_SECONDS,
        )
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        body = e.response.text if e.response is not None else ""
        logger.error(
            "Paystack POST %s failed: %s %s",
            url,
            getattr(e.response, "status_code", ""),
            body[:500],
        )
        raise


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


def is_valid_signature(body: bytes, signature: str) -> bool:
    """Check the X-Paystack-Signature header against the raw request body."""
    secret = settings.PAYSTACK_SECRET_KEY
    if not secret or not signature:
        return False
    expected = compute_signature(body, secret)
    return hmac.compare_digest(expected, signature.strip().lower())
