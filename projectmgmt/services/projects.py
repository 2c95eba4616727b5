# projectmgmt/services/projects.py
"""Project operations with visibility and assignment rules applied.

Every function receives the caller explicitly and runs as a single
transaction on the given session.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Query, Session

from projectmgmt.exceptions import ForbiddenError, InvalidRequestError, NotFoundError
from projectmgmt.models.project import PriorityLevel, Project, ProjectStatus
from projectmgmt.models.users import User
from projectmgmt.schemas.common import Page, PageRequest
from projectmgmt.schemas.project import (
    ProjectCreate, ProjectResponse, ProjectStatusUpdate, ProjectUpdate,
)
from projectmgmt.services import policy
from projectmgmt.services.base import fetch_page, require_caller, transaction
from projectmgmt.services.policy import Caller
from projectmgmt.utils.audit import write_log

logger = logging.getLogger(__name__)

RESOURCE = "projects"

# Fields a PUT may clear with an explicit null
_CLEARABLE_FIELDS = {"description", "assigned_to_id"}


def _sort_columns(sort_by: str, order: str):
    if sort_by == "priority":
        col = case({p: p.rank for p in PriorityLevel}, value=Project.priority)
    elif sort_by == "status":
        col = case({s: i for i, s in enumerate(ProjectStatus)}, value=Project.status)
    else:
        allowed = {
            "id": Project.id,
            "name": Project.name,
            "start_date": Project.start_date,
            "end_date": Project.end_date,
        }
        col = allowed.get(sort_by, Project.id)
    primary = col.asc() if order == "asc" else col.desc()
    return primary, Project.id.asc()


def _get_project(db: Session, project_id: int, for_update: bool = False) -> Project:
    query: Query = db.query(Project).filter(Project.id == project_id)
    if for_update:
        query = query.with_for_update(of=Project)
    project = query.first()
    if project is None:
        raise NotFoundError.for_entity("Project", "id", project_id)
    return project


def _resolve_assignee(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError.for_entity("User", "id", user_id)
    return user


def _check_name(name: Optional[str]) -> None:
    if name is None or not name.strip():
        raise InvalidRequestError("Project name is required")


def _check_end_date(end_date: Optional[date], today: date) -> None:
    if end_date is None:
        raise InvalidRequestError("End date is required")
    if end_date <= today:
        raise InvalidRequestError("End date must be in the future")


def create_project(
    db: Session,
    request: ProjectCreate,
    caller: Optional[Caller],
    *,
    today: Optional[date] = None,
    ip: Optional[str] = None,
) -> ProjectResponse:
    caller = require_caller(caller)
    if not policy.can_create_project(caller):
        logger.warning("User %s denied project creation", caller.username)
        raise ForbiddenError("Only managers can create projects")

    _check_name(request.name)
    if request.start_date is None:
        raise InvalidRequestError("Start date is required")
    _check_end_date(request.end_date, today or date.today())

    assignee = None
    if request.assigned_to_id is not None:
        assignee = _resolve_assignee(db, request.assigned_to_id)

    project = Project(
        name=request.name,
        description=request.description,
        start_date=request.start_date,
        end_date=request.end_date,
        priority=request.priority,
        status=request.status,
        assigned_to=assignee,
    )
    project.stamp_created(caller.username)

    with transaction(db):
        db.add(project)
        db.flush()
        write_log(db, user_id=caller.id, action="PROJECT_CREATE", resource=RESOURCE, ip=ip,
                  meta={"project_id": project.id, "assigned_to_id": request.assigned_to_id})
    db.refresh(project)

    logger.info("Project %s created by %s", project.id, caller.username)
    return ProjectResponse.from_project(project)


def update_project(
    db: Session,
    project_id: int,
    request: ProjectUpdate,
    caller: Optional[Caller],
    *,
    today: Optional[date] = None,
    ip: Optional[str] = None,
) -> ProjectResponse:
    caller = require_caller(caller)
    if not policy.can_edit_project(caller):
        logger.warning("User %s denied update of project %s", caller.username, project_id)
        raise ForbiddenError("Only managers can update projects")

    changes = {field: getattr(request, field) for field in request.model_fields_set}

    # Validate the whole patch before touching the entity
    for field, value in changes.items():
        if value is None and field not in _CLEARABLE_FIELDS:
            raise InvalidRequestError(f"Field '{field}' cannot be null")
    if "name" in changes:
        _check_name(changes["name"])
    if "end_date" in changes:
        _check_end_date(changes["end_date"], today or date.today())

    with transaction(db):
        project = _get_project(db, project_id, for_update=True)

        if "assigned_to_id" in changes:
            assignee_id = changes.pop("assigned_to_id")
            project.assigned_to = _resolve_assignee(db, assignee_id) if assignee_id is not None else None

        for field, value in changes.items():
            setattr(project, field, value)
        project.stamp_updated(caller.username)

        write_log(db, user_id=caller.id, action="PROJECT_UPDATE", resource=RESOURCE, ip=ip,
                  meta={"project_id": project_id, "fields": sorted(request.model_fields_set)})
    db.refresh(project)

    logger.info("Project %s updated by %s", project_id, caller.username)
    return ProjectResponse.from_project(project)


def delete_project(db: Session, project_id: int, caller: Optional[Caller], *, ip: Optional[str] = None) -> None:
    caller = require_caller(caller)
    if not policy.can_delete_project(caller):
        logger.warning("User %s denied deletion of project %s", caller.username, project_id)
        raise ForbiddenError("Only managers can delete projects")

    with transaction(db):
        project = _get_project(db, project_id)
        db.delete(project)
        write_log(db, user_id=caller.id, action="PROJECT_DELETE", resource=RESOURCE, ip=ip,
                  meta={"project_id": project_id, "name": project.name})

    logger.info("Project %s deleted by %s", project_id, caller.username)


def get_project(db: Session, project_id: int, caller: Optional[Caller]) -> ProjectResponse:
    caller = require_caller(caller)
    project = _get_project(db, project_id)
    if not policy.can_view_project(caller, project):
        raise ForbiddenError("You can only view your assigned projects")
    return ProjectResponse.from_project(project)


def list_projects(db: Session, caller: Optional[Caller], page: PageRequest) -> Page[ProjectResponse]:
    """Every project for managers; other callers see their own assignments."""
    caller = require_caller(caller)
    if not caller.is_manager:
        return list_my_projects(db, caller, page)

    query = db.query(Project)
    total = query.count()
    items = fetch_page(query.order_by(*_sort_columns(page.sort_by, page.order)), page, total)
    return Page[ProjectResponse].build([ProjectResponse.from_project(p) for p in items], total, page)


def update_project_status(
    db: Session,
    project_id: int,
    request: ProjectStatusUpdate,
    caller: Optional[Caller],
    *,
    ip: Optional[str] = None,
) -> ProjectResponse:
    caller = require_caller(caller)

    with transaction(db):
        project = _get_project(db, project_id, for_update=True)
        if not policy.can_change_status(caller, project):
            logger.warning("User %s denied status change of project %s", caller.username, project_id)
            raise ForbiddenError("You can only update status of your assigned projects")

        previous = project.status
        project.status = request.status
        project.stamp_updated(caller.username)
        write_log(db, user_id=caller.id, action="PROJECT_STATUS", resource=RESOURCE, ip=ip,
                  meta={"project_id": project_id, "from": previous.value, "to": request.status.value})
    db.refresh(project)

    logger.info("Project %s status %s -> %s by %s", project_id, previous.value, request.status.value, caller.username)
    return ProjectResponse.from_project(project)


def list_my_projects(db: Session, caller: Optional[Caller], page: PageRequest) -> Page[ProjectResponse]:
    caller = require_caller(caller)
    user = db.query(User).filter(User.username == caller.username).first()
    if user is None:
        raise NotFoundError("User not found")

    # TODO: push offset/limit into the query once assignment lists grow large
    projects = (
        db.query(Project)
        .filter(Project.assigned_to_id == user.id)
        .order_by(*_sort_columns(page.sort_by, page.order))
        .all()
    )
    items = [ProjectResponse.from_project(p) for p in projects]
    start = min(page.offset, len(items))
    end = min(start + page.limit, len(items))
    return Page[ProjectResponse].build(items[start:end], len(items), page)
