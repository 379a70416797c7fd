from fastapi import APIRouter, Depends, HTTPException, Response

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.content_posts import (
    ContentPostBatchCreate,
    ContentPostCreate,
    ContentPostRead,
    ContentPostUpdate,
)
from creator_crm.services.errors import RecordNotFoundError
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/content-posts", tags=["content-posts"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("", response_model=list[ContentPostRead])
def list_content_posts(scope: SessionScope = _SCOPE_DEP):
    return scope.content_posts.fetch()


@router.post("", response_model=ContentPostRead, status_code=201)
def create_content_post(payload: ContentPostCreate, scope: SessionScope = _SCOPE_DEP):
    return scope.create_content_post(payload.model_dump()).record


@router.post("/batch", response_model=list[ContentPostRead], status_code=201)
def create_content_posts(payload: ContentPostBatchCreate, scope: SessionScope = _SCOPE_DEP):
    """One post per selected platform."""
    data = payload.model_dump(exclude={"platforms"})
    return scope.create_content_posts(data, payload.platforms)


@router.patch("/{post_id}", response_model=ContentPostRead)
def update_content_post(post_id: str, payload: ContentPostUpdate, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.update_content_post(post_id, payload.model_dump(exclude_unset=True)).record
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Content post not found")


@router.delete("/{post_id}", status_code=204)
def delete_content_post(post_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        scope.delete_content_post(post_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Content post not found")
    return Response(status_code=204)
