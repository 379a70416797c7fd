from fastapi import APIRouter, Depends, HTTPException, Response

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from creator_crm.services.errors import RecordNotFoundError
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/tasks", tags=["tasks"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("", response_model=list[TaskRead])
def list_tasks(scope: SessionScope = _SCOPE_DEP):
    """Most recent tasks only (TASK_HISTORY_LIMIT)."""
    return scope.tasks.fetch()


@router.post("", response_model=TaskRead, status_code=201)
def create_task(payload: TaskCreate, scope: SessionScope = _SCOPE_DEP):
    return scope.create_task(payload.model_dump()).record


@router.patch("/{task_id}", response_model=TaskRead)
def update_task(task_id: str, payload: TaskUpdate, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.update_task(task_id, payload.model_dump(exclude_unset=True)).record
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        scope.delete_task(task_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=204)
