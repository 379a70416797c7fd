from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from creator_crm.core.security import decode_access_token_subject
from creator_crm.database import get_db
from creator_crm.services.session_scope import SessionScope

# Tokens are issued by the auth provider; this API only verifies them.
bearer_optional = HTTPBearer(auto_error=False)

_DB_DEP = Depends(get_db)
_BEARER_OPT_DEP = Depends(bearer_optional)


def _extract_bearer_from_headers(request: Request) -> Optional[str]:
    # Some proxies strip the standard Authorization header.
    raw = request.headers.get("authorization") or request.headers.get("x-auth-token")
    if not raw:
        return None
    s = str(raw).strip()
    if not s:
        return None
    if s.lower().startswith("bearer "):
        return s.split(" ", 1)[1].strip()
    return s


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = _BEARER_OPT_DEP,
) -> str:
    """Identity (`sub` claim) of the bearer token."""

    token = credentials.credentials if credentials else _extract_bearer_from_headers(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    subject = decode_access_token_subject(token)
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return subject


_IDENTITY_DEP = Depends(get_current_identity)


def get_session_scope(
    db: Session = _DB_DEP,
    user_id: str = _IDENTITY_DEP,
) -> SessionScope:
    return SessionScope(db, user_id=user_id)
