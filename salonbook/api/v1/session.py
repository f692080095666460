from fastapi import APIRouter, Depends

from salonbook.api.v1.deps import get_session
from salonbook.api.v1.schemas import SessionSchema
from salonbook.domain.entities.session import Session, home_path

router = APIRouter()


@router.get("/session", response_model=SessionSchema)
def current_session(session: Session = Depends(get_session)):
    return SessionSchema(user_id=session.user_id, role=session.role.value, home_path=home_path(session.role))
