from fastapi import APIRouter, Depends, HTTPException, Response

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.notifications import NotificationRead, UnreadCount
from creator_crm.services.errors import RecordNotFoundError
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/notifications", tags=["notifications"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("", response_model=list[NotificationRead])
def list_notifications(scope: SessionScope = _SCOPE_DEP):
    return scope.notifications.fetch()


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(scope: SessionScope = _SCOPE_DEP):
    return UnreadCount(unread=scope.unread_notification_count())


@router.post("/read-all", response_model=list[NotificationRead])
def mark_all_read(scope: SessionScope = _SCOPE_DEP):
    return scope.mark_all_notifications_read()


@router.post("/clear", response_model=list[NotificationRead])
def clear_notifications(scope: SessionScope = _SCOPE_DEP):
    return scope.clear_notifications()


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(notification_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.mark_notification_read(notification_id).record
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found")


@router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        scope.delete_notification(notification_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found")
    return Response(status_code=204)
