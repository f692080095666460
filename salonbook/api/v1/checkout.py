from fastapi import APIRouter, Depends

from salonbook.api.v1.deps import get_session, http_error, order_schema, resolve_booking_request
from salonbook.api.v1.schemas import (
    BookingSchema,
    CheckoutRequestSchema,
    CheckoutResponseSchema,
    IntentSchema,
    PaymentConfirmationSchema,
    PaymentFailureSchema,
    QuoteRequestSchema,
    QuoteSchema,
)
from salonbook.application.exceptions import SalonBookError
from salonbook.application.ports.salon_catalog import SalonCatalogPort
from salonbook.application.use_cases.settlement import CheckoutResult, SettlementUseCase
from salonbook.domain.entities.session import Session
from salonbook.wiring.dependencies import get_payment_gateway, get_salon_catalog, get_settlement_use_case

router = APIRouter(prefix="/checkout")


def _response(result: CheckoutResult) -> CheckoutResponseSchema:
    order = None
    if result.order is not None:
        order = order_schema(
            result.order,
            key=get_payment_gateway().public_key,
            description=f"Booking at salon {result.intent.request.salon_id}",
        )
    return CheckoutResponseSchema(
        intent=IntentSchema.from_intent(result.intent),
        booking=BookingSchema.from_booking(result.booking) if result.booking else None,
        order=order,
    )


@router.post("/quote", response_model=QuoteSchema)
def quote(
    req: QuoteRequestSchema,
    session: Session = Depends(get_session),
    uc: SettlementUseCase = Depends(get_settlement_use_case),
    catalog: SalonCatalogPort = Depends(get_salon_catalog),
):
    request = resolve_booking_request(req.booking, catalog)
    try:
        result, applied = uc.quote(session, request, req.promo_code, req.use_wallet)
    except (SalonBookError, ValueError) as e:
        raise http_error(e)
    return QuoteSchema.from_quote(result, applied.code if applied else None)


@router.post("", response_model=CheckoutResponseSchema)
def checkout(
    req: CheckoutRequestSchema,
    session: Session = Depends(get_session),
    uc: SettlementUseCase = Depends(get_settlement_use_case),
    catalog: SalonCatalogPort = Depends(get_salon_catalog),
):
    request = resolve_booking_request(req.booking, catalog)
    try:
        result = uc.checkout(
            session,
            request,
            promo_code=req.promo_code,
            use_wallet=req.use_wallet,
            payment_method=req.payment_method,
        )
    except (SalonBookError, ValueError, RuntimeError) as e:
        raise http_error(e)
    return _response(result)


@router.get("/{intent_id}", response_model=IntentSchema)
def get_intent(
    intent_id: str,
    session: Session = Depends(get_session),
    uc: SettlementUseCase = Depends(get_settlement_use_case),
):
    try:
        return IntentSchema.from_intent(uc.get_intent(session, intent_id))
    except SalonBookError as e:
        raise http_error(e)


@router.post("/{intent_id}/confirm", response_model=BookingSchema)
def confirm(
    intent_id: str,
    req: PaymentConfirmationSchema,
    session: Session = Depends(get_session),
    uc: SettlementUseCase = Depends(get_settlement_use_case),
):
    try:
        booking = uc.confirm_payment(
            session,
            intent_id,
            order_id=req.razorpay_order_id,
            payment_id=req.razorpay_payment_id,
            signature=req.razorpay_signature,
        )
    except SalonBookError as e:
        raise http_error(e)
    return BookingSchema.from_booking(booking)


@router.post("/{intent_id}/fail", response_model=IntentSchema)
def fail(
    intent_id: str,
    req: PaymentFailureSchema,
    session: Session = Depends(get_session),
    uc: SettlementUseCase = Depends(get_settlement_use_case),
):
    try:
        return IntentSchema.from_intent(uc.fail_payment(session, intent_id, req.reason))
    except SalonBookError as e:
        raise http_error(e)


@router.post("/{intent_id}/retry", response_model=CheckoutResponseSchema)
def retry(
    intent_id: str,
    session: Session = Depends(get_session),
    uc: SettlementUseCase = Depends(get_settlement_use_case),
):
    try:
        return _response(uc.retry_payment(session, intent_id))
    except SalonBookError as e:
        raise http_error(e)
