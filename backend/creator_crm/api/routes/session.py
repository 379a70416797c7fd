from fastapi import APIRouter, Depends

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.session import SessionSnapshot
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/snapshot", response_model=SessionSnapshot)
def session_snapshot(scope: SessionScope = Depends(get_session_scope)):
    """Everything the signed-in identity sees, loaded in one call."""
    return scope.load_all()
