from fastapi import APIRouter, Depends, HTTPException, Response

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate
from creator_crm.services.errors import RecordNotFoundError
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/projects", tags=["projects"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("", response_model=list[ProjectRead])
def list_projects(scope: SessionScope = _SCOPE_DEP):
    return scope.projects.fetch()


@router.get("/{project_id}", response_model=ProjectRead)
def get_project(project_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.projects.get(project_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")


@router.post("", response_model=ProjectRead, status_code=201)
def create_project(payload: ProjectCreate, scope: SessionScope = _SCOPE_DEP):
    return scope.create_project(payload.model_dump()).record


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(project_id: str, payload: ProjectUpdate, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.update_project(project_id, payload.model_dump(exclude_unset=True)).record
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        scope.delete_project(project_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")
    return Response(status_code=204)
