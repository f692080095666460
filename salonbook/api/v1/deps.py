from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from salonbook.api.v1.schemas import BookingRequestSchema, GatewayOrderSchema
from salonbook.application.exceptions import (
    ConcurrentModificationError,
    DocumentStoreError,
    EmptySelectionError,
    InsufficientBalanceError,
    InvalidPromoCodeError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    PaymentGatewayError,
    PaymentVerificationError,
    StaffIncompatibleError,
    WizardStageIncompleteError,
)
from salonbook.application.ports.identity import IdentityPort
from salonbook.application.ports.payment_gateway import GatewayOrder
from salonbook.application.ports.salon_catalog import SalonCatalogPort
from salonbook.core.config import settings
from salonbook.domain.entities.session import Session
from salonbook.domain.entities.settlement import BookingRequest
from salonbook.wiring.dependencies import get_identity

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[Exception], int], ...] = (
    (InvalidPromoCodeError, status.HTTP_400_BAD_REQUEST),
    (WizardStageIncompleteError, status.HTTP_400_BAD_REQUEST),
    (StaffIncompatibleError, status.HTTP_400_BAD_REQUEST),
    (PaymentVerificationError, status.HTTP_400_BAD_REQUEST),
    (ValueError, status.HTTP_400_BAD_REQUEST),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT),
    (InsufficientBalanceError, status.HTTP_409_CONFLICT),
    (PaymentGatewayError, status.HTTP_502_BAD_GATEWAY),
    (DocumentStoreError, status.HTTP_502_BAD_GATEWAY),
)


def http_error(e: Exception) -> HTTPException:
    """Translate an application error into the HTTP error shown to the user."""
    if isinstance(e, EmptySelectionError):
        logger.error("Internal checkout error", extra={"error": str(e)})
        return HTTPException(status_code=500, detail="Internal error")
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            return HTTPException(status_code=code, detail=str(e))
    raise e


def get_session(
    authorization: str | None = Header(None),
    identity: IdentityPort = Depends(get_identity),
) -> Session:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    session = identity.resolve(authorization.split(" ", 1)[1])
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return session


def resolve_booking_request(payload: BookingRequestSchema, catalog: SalonCatalogPort) -> BookingRequest:
    """Build a request from catalog prices; client-sent prices are never trusted."""
    services = []
    for service_id in dict.fromkeys(payload.service_ids):
        item = catalog.get_service(payload.salon_id, service_id)
        if item is None:
            raise HTTPException(status_code=400, detail=f"Unknown service {service_id}")
        services.append(item)

    if payload.staff_id is not None:
        staff = catalog.get_staff(payload.salon_id, payload.staff_id)
        if staff is None:
            raise HTTPException(status_code=400, detail=f"Unknown staff member {payload.staff_id}")
        if not staff.can_perform({s.category for s in services}):
            raise HTTPException(status_code=400, detail=f"{staff.name} cannot perform every selected service")

    return BookingRequest(
        salon_id=payload.salon_id,
        services=tuple(services),
        staff_id=payload.staff_id,
        appointment_date=payload.date,
        time_slot=payload.time,
        special_request=payload.special_request.strip(),
    )


def order_schema(order: GatewayOrder, key: str, description: str) -> GatewayOrderSchema:
    return GatewayOrderSchema(
        key=key,
        order_id=order.id,
        amount=order.amount_minor,
        currency=order.currency,
        name=settings.BUSINESS_NAME,
        description=description,
    )
