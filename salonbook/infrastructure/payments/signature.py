from __future__ import annotations

import hmac
import logging


logger = logging.getLogger(__name__)


def sign_payment(order_id: str, payment_id: str, key_secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(key_secret.encode("utf-8"), message, "sha256").hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str | None, key_secret: str | None) -> bool:
    if not signature or not order_id or not payment_id:
        return False
    if not key_secret:
        logger.error("Missing key secret for payment signature verification")
        return False
    expected = sign_payment(order_id, payment_id, key_secret)
    return hmac.compare_digest(expected, signature)


def verify_webhook_signature(body: bytes, signature_header: str | None, webhook_secret: str | None, env: str) -> bool:
    if not signature_header:
        if env.lower() in {"dev", "local"}:
            logger.warning("Missing webhook signature header; accepting in dev mode")
            return True
        return False

    if not webhook_secret:
        logger.error("Missing webhook secret for signature verification")
        return False

    expected = hmac.new(webhook_secret.encode("utf-8"), body, "sha256").hexdigest()
    return hmac.compare_digest(expected, signature_header)
