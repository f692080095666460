from fastapi import APIRouter, Depends

from salonbook.api.v1.deps import get_session, http_error, order_schema
from salonbook.api.v1.schemas import (
    RechargeConfirmationSchema,
    RechargeRequestSchema,
    RechargeResponseSchema,
    WalletSchema,
)
from salonbook.application.exceptions import SalonBookError
from salonbook.application.use_cases.recharge import WalletRechargeUseCase
from salonbook.application.use_cases.wallet import WalletService
from salonbook.domain.entities.session import Session
from salonbook.wiring.dependencies import get_payment_gateway, get_recharge_use_case, get_wallet_service

router = APIRouter(prefix="/wallet")


@router.get("", response_model=WalletSchema)
def get_wallet(
    session: Session = Depends(get_session),
    wallet: WalletService = Depends(get_wallet_service),
):
    try:
        return WalletSchema.from_wallet(wallet.get_wallet(session.user_id))
    except SalonBookError as e:
        raise http_error(e)


@router.post("/recharge", response_model=RechargeResponseSchema)
def start_recharge(
    req: RechargeRequestSchema,
    session: Session = Depends(get_session),
    uc: WalletRechargeUseCase = Depends(get_recharge_use_case),
):
    try:
        recharge_id, order = uc.start(session, req.amount)
    except (SalonBookError, ValueError) as e:
        raise http_error(e)
    return RechargeResponseSchema(
        recharge_id=recharge_id,
        order=order_schema(order, key=get_payment_gateway().public_key, description="Wallet recharge"),
    )


@router.post("/recharge/{recharge_id}/confirm", response_model=WalletSchema)
def confirm_recharge(
    recharge_id: str,
    req: RechargeConfirmationSchema,
    session: Session = Depends(get_session),
    uc: WalletRechargeUseCase = Depends(get_recharge_use_case),
):
    try:
        wallet = uc.confirm(session, recharge_id, req.razorpay_payment_id, req.razorpay_signature)
    except SalonBookError as e:
        raise http_error(e)
    return WalletSchema.from_wallet(wallet)
