from fastapi import APIRouter, Depends

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.users import (
    UserProfileRead,
    UserProfileUpdate,
    UserSettingsRead,
    UserSettingsUpdate,
)
from creator_crm.services.session_scope import SessionScope

router = APIRouter(tags=["profile"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("/profile", response_model=UserProfileRead)
def get_profile(scope: SessionScope = _SCOPE_DEP):
    """Created empty on first access."""
    return scope.get_profile()


@router.patch("/profile", response_model=UserProfileRead)
def update_profile(payload: UserProfileUpdate, scope: SessionScope = _SCOPE_DEP):
    # Business details propagate to existing invoices.
    return scope.update_profile(payload.model_dump(exclude_unset=True))


@router.get("/settings", response_model=UserSettingsRead)
def get_settings(scope: SessionScope = _SCOPE_DEP):
    return scope.get_settings()


@router.patch("/settings", response_model=UserSettingsRead)
def update_settings(payload: UserSettingsUpdate, scope: SessionScope = _SCOPE_DEP):
    return scope.update_settings(payload.model_dump(exclude_unset=True))
