from fastapi import APIRouter, Depends, Query, Response

from salonbook.api.v1.deps import get_session, http_error
from salonbook.api.v1.schemas import AccountActivationSchema, AccountSchema, SalonApprovalSchema, SalonSchema
from salonbook.application.exceptions import SalonBookError
from salonbook.application.use_cases.admin import AdminUseCase
from salonbook.domain.entities.salon import ApprovalStatus
from salonbook.domain.entities.session import Session
from salonbook.wiring.dependencies import get_admin_use_case

router = APIRouter(prefix="/admin")


@router.get("/salons", response_model=list[SalonSchema])
def list_salons(
    status: ApprovalStatus | None = Query(None),
    session: Session = Depends(get_session),
    uc: AdminUseCase = Depends(get_admin_use_case),
):
    try:
        salons = uc.list_salons(session, status=status)
    except SalonBookError as e:
        raise http_error(e)
    return [SalonSchema.from_salon(s) for s in salons]


@router.post("/salons/{salon_id}/approval", response_model=SalonSchema)
def set_salon_approval(
    salon_id: str,
    req: SalonApprovalSchema,
    session: Session = Depends(get_session),
    uc: AdminUseCase = Depends(get_admin_use_case),
):
    try:
        return SalonSchema.from_salon(uc.set_salon_approval(session, salon_id, req.status))
    except SalonBookError as e:
        raise http_error(e)


@router.delete("/salons/{salon_id}", status_code=204)
def delete_salon(
    salon_id: str,
    session: Session = Depends(get_session),
    uc: AdminUseCase = Depends(get_admin_use_case),
):
    try:
        uc.delete_salon(session, salon_id)
    except SalonBookError as e:
        raise http_error(e)
    return Response(status_code=204)


@router.get("/users", response_model=list[AccountSchema])
def list_accounts(
    session: Session = Depends(get_session),
    uc: AdminUseCase = Depends(get_admin_use_case),
):
    try:
        return [AccountSchema.from_account(a) for a in uc.list_accounts(session)]
    except SalonBookError as e:
        raise http_error(e)


@router.post("/users/{user_id}/active", response_model=AccountSchema)
def set_account_active(
    user_id: str,
    req: AccountActivationSchema,
    session: Session = Depends(get_session),
    uc: AdminUseCase = Depends(get_admin_use_case),
):
    try:
        return AccountSchema.from_account(uc.set_account_active(session, user_id, req.is_active))
    except SalonBookError as e:
        raise http_error(e)


@router.delete("/users/{user_id}", status_code=204)
def delete_account(
    user_id: str,
    session: Session = Depends(get_session),
    uc: AdminUseCase = Depends(get_admin_use_case),
):
    try:
        uc.delete_account(session, user_id)
    except SalonBookError as e:
        raise http_error(e)
    return Response(status_code=204)
