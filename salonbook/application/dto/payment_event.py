from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class PaymentNotice:
    event: str
    order_id: str
    payment_id: str
    reason: str | None = None


class PaymentEntityDTO(BaseModel):
    id: str | None = None
    order_id: str | None = None
    error_code: str | None = None
    error_description: str | None = None


class PaymentEnvelopeDTO(BaseModel):
    entity: PaymentEntityDTO | None = None


class PaymentPayloadDTO(BaseModel):
    payment: PaymentEnvelopeDTO | None = None


class PaymentEventDTO(BaseModel):
    event: str | None = None
    payload: PaymentPayloadDTO = Field(default_factory=PaymentPayloadDTO)

    def extract_notice(self) -> PaymentNotice | None:
        entity = self.payload.payment.entity if self.payload.payment else None
        if not (self.event and entity and entity.order_id and entity.id):
            return None
        return PaymentNotice(
            event=self.event,
            order_id=entity.order_id,
            payment_id=entity.id,
            reason=entity.error_description or entity.error_code,
        )
