from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, Response
from pydantic import ValidationError

from salonbook.application.dto.payment_event import PaymentEventDTO
from salonbook.application.exceptions import InsufficientBalanceError, InvalidTransitionError, SalonBookError
from salonbook.core.config import settings
from salonbook.infrastructure.payments.signature import verify_webhook_signature
from salonbook.wiring.dependencies import get_settlement_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/v1/payments/webhook")
async def payment_webhook(request: Request) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Razorpay-Signature")
    if not verify_webhook_signature(body, signature, settings.RAZORPAY_WEBHOOK_SECRET, settings.ENV):
        logger.warning("Payment webhook rejected", extra={"reason": "bad_signature"})
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Failed to parse payment webhook body", extra={"error": str(e)})
        return Response(status_code=400)

    try:
        notice = PaymentEventDTO.model_validate(payload).extract_notice()
    except ValidationError as e:
        logger.warning("Payment webhook body has unexpected shape", extra={"error": str(e)})
        return Response(status_code=400)
    if notice is None:
        return Response(status_code=200)

    use_case = get_settlement_use_case()
    try:
        if notice.event == "payment.captured":
            booking = use_case.capture_from_webhook(notice.order_id, notice.payment_id)
            logger.info(
                "Payment webhook settled",
                extra={"booking_id": booking.id if booking else None, "status": notice.event},
            )
        elif notice.event == "payment.failed":
            use_case.fail_from_webhook(notice.order_id, notice.reason or "payment_failed")
        else:
            logger.info("Payment webhook ignored", extra={"status": notice.event})
    except (InvalidTransitionError, InsufficientBalanceError) as e:
        # final state already reached or payment handed back; nothing to redeliver
        logger.warning("Payment webhook not applied", extra={"status": notice.event, "error": str(e)})
    except SalonBookError as e:
        logger.exception("Error processing payment webhook", extra={"status": notice.event, "error": str(e)})
        return Response(status_code=500)

    return Response(status_code=200)
