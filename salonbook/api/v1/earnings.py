from typing import Any

from fastapi import APIRouter, Depends

from salonbook.api.v1.deps import get_session, http_error
from salonbook.api.v1.schemas import EarningsSchema, PayoutRequestSchema
from salonbook.application.exceptions import SalonBookError
from salonbook.application.use_cases.earnings import EarningsUseCase
from salonbook.domain.entities.session import Session
from salonbook.wiring.dependencies import get_earnings_use_case

router = APIRouter(prefix="/earnings")


@router.get("", response_model=EarningsSchema)
def earnings(
    session: Session = Depends(get_session),
    uc: EarningsUseCase = Depends(get_earnings_use_case),
):
    try:
        summary = uc.summary(session)
    except SalonBookError as e:
        raise http_error(e)
    return EarningsSchema(**summary.__dict__)


@router.post("/payouts")
def request_payout(
    req: PayoutRequestSchema,
    session: Session = Depends(get_session),
    uc: EarningsUseCase = Depends(get_earnings_use_case),
) -> dict[str, Any]:
    try:
        return uc.request_payout(session, req.amount)
    except (SalonBookError, ValueError) as e:
        raise http_error(e)
