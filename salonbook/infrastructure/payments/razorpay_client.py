from __future__ import annotations

import logging

import httpx

from salonbook.application.exceptions import PaymentGatewayError
from salonbook.application.ports.payment_gateway import GatewayOrder, PaymentGatewayPort
from salonbook.core.config import settings
from salonbook.infrastructure.payments.signature import verify_payment_signature


class RazorpayGateway(PaymentGatewayPort):
    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._key_id = key_id or settings.RAZORPAY_KEY_ID
        self._key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        self._base_url = (base_url or settings.RAZORPAY_BASE_URL).rstrip("/")
        self._logger = logging.getLogger(__name__)

        if not self._key_id or not self._key_secret:
            raise ValueError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required for Razorpay")

        self._client = client or httpx.Client(
            timeout=timeout or settings.PAYMENT_TIMEOUT_SECONDS,
            auth=(self._key_id, self._key_secret),
        )

    @property
    def public_key(self) -> str:
        return self._key_id

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> GatewayOrder:
        payload = {"amount": amount_minor, "currency": currency, "receipt": receipt}
        data = self._post("/orders", payload, action="create_order")

        order_id = data.get("id")
        if not order_id:
            raise PaymentGatewayError("No order id returned from Razorpay")

        self._logger.info("Razorpay order created", extra={"intent_id": receipt, "amount": amount_minor})
        return GatewayOrder(
            id=str(order_id),
            amount_minor=int(data.get("amount", amount_minor)),
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
        )

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(order_id, payment_id, signature, self._key_secret)

    def refund(self, payment_id: str, amount_minor: int) -> str:
        data = self._post(f"/payments/{payment_id}/refund", {"amount": amount_minor}, action="refund")
        refund_id = data.get("id")
        if not refund_id:
            raise PaymentGatewayError("No refund id returned from Razorpay")
        self._logger.info("Razorpay refund created", extra={"amount": amount_minor, "status": data.get("status")})
        return str(refund_id)

    def _post(self, path: str, payload: dict, action: str) -> dict:
        try:
            resp = self._client.post(f"{self._base_url}{path}", json=payload)
        except httpx.HTTPError as e:
            self._logger.error("Razorpay request failed", extra={"reason": action, "error": str(e)})
            raise PaymentGatewayError(f"Razorpay {action} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("description")
            except ValueError:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "Razorpay request rejected",
                extra={
                    "reason": action,
                    "status": resp.status_code,
                    "error": f"{error_code}: {error_message}",
                },
            )
            raise PaymentGatewayError(f"Razorpay {action} rejected: {error_message or resp.status_code}")

        return resp.json()
