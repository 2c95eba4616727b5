# projectmgmt/routes/projects.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from projectmgmt.database import get_db
from projectmgmt.routes.params import page_params
from projectmgmt.schemas.common import ApiResponse, Page, PageRequest, ok
from projectmgmt.schemas.project import (
    ProjectCreate, ProjectResponse, ProjectStatusUpdate, ProjectUpdate,
)
from projectmgmt.services import projects as service
from projectmgmt.services.policy import Caller
from projectmgmt.utils.audit import client_ip
from projectmgmt.utils.tokenJWT import get_current_caller

router = APIRouter(prefix="/api/projects", tags=["Projects"])


# Create a project (managers only)
@router.post("", response_model=ApiResponse[ProjectResponse])
def create_project(
    payload: ProjectCreate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.create_project(db, payload, caller, ip=client_ip(request)))


# Projects visible to the caller: all for managers, assigned ones otherwise
@router.get("", response_model=ApiResponse[Page[ProjectResponse]])
def list_projects(
    page: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.list_projects(db, caller, page))


# Projects assigned to the caller
@router.get("/my", response_model=ApiResponse[Page[ProjectResponse]])
def list_my_projects(
    page: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.list_my_projects(db, caller, page))


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.get_project(db, project_id, caller))


# Update project fields (managers only); fields missing from the body are kept
@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.update_project(db, project_id, payload, caller, ip=client_ip(request)))


# Change status only (assignee or manager)
@router.patch("/{project_id}/status", response_model=ApiResponse[ProjectResponse])
def update_project_status(
    project_id: int,
    payload: ProjectStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.update_project_status(db, project_id, payload, caller, ip=client_ip(request)))


@router.delete("/{project_id}", response_model=ApiResponse[None])
def delete_project(
    project_id: int,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    service.delete_project(db, project_id, caller, ip=client_ip(request))
    return ok(message="Project deleted successfully")
