import json
import logging
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from jobs.tasks import enqueue, process_charge_success
from .events import log_payment_event
from .models import PaymentEvent
from .paystack import is_valid_signature
from .serializers import WebhookEventSerializer

logger = logging.getLogger(__name__)

SETTLING_EVENTS = {"charge.success"}


@csrf_exempt
@require_POST
def paystack_webhook(request):
    """
    Provider push notifications. The signature is checked against the raw
    body before anything is parsed; charge.success is handed to a job that
    re-verifies with the provider before settling.
    """
    body = request.body
    signature = request.headers.get("X-Paystack-Signature", "")
    if not is_valid_signature(body, signature):
        log_payment_event(
            PaymentEvent.KIND_WEBHOOK_REJECTED,
            detail="missing signature" if not signature else "signature mismatch",
            payload={"remote_addr": request.META.get("REMOTE_ADDR", "")},
        )
        return JsonResponse({"status": "error", "message": "invalid signature"}, status=401)
    try:
        payload = json.loads(body)
    except ValueError:
        return JsonResponse({"status": "error", "message": "invalid JSON"}, status=400)
    serializer = WebhookEventSerializer(data=payload if isinstance(payload, dict) else {})
    if not serializer.is_valid():
        return JsonResponse(
            {"status": "error", "message": "invalid event", "errors": serializer.errors},
            status=400,
        )
    event = serializer.validated_data["event"]
    reference = serializer.reference
    log_payment_event(
        PaymentEvent.KIND_WEBHOOK_RECEIVED,
        reference=reference,
        detail=event,
        payload=payload,
        level=logging.INFO,
    )
    if event in SETTLING_EVENTS and reference:
        if not enqueue(process_charge_success, reference):
            # non-2xx makes Paystack redeliver later
            return JsonResponse({"status": "error", "message": "try again later"}, status=503)
    return JsonResponse({"status": "success"})
