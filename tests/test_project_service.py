from datetime import date, timedelta

import pytest

from projectmgmt.exceptions import (
    ForbiddenError, InvalidRequestError, NotFoundError, UnauthenticatedError,
)
from projectmgmt.models.log import Log
from projectmgmt.models.project import PriorityLevel, Project, ProjectStatus
from projectmgmt.schemas.common import PageRequest
from projectmgmt.schemas.project import ProjectCreate, ProjectStatusUpdate, ProjectUpdate
from projectmgmt.services import projects as service
from projectmgmt.services.policy import Caller
from projectmgmt.models.users import RoleType

TODAY = date.today()
NEXT_MONTH = TODAY + timedelta(days=30)


def _create_request(**overrides):
    data = {
        "name": "Apollo",
        "description": "Moonshot",
        "start_date": TODAY,
        "end_date": NEXT_MONTH,
        "priority": PriorityLevel.HIGH,
    }
    data.update(overrides)
    return ProjectCreate(**data)


# ---- create ----

def test_manager_creates_project_with_default_status(db, manager_caller, employee):
    result = service.create_project(db, _create_request(assigned_to_id=employee.id), manager_caller)

    assert result.status == ProjectStatus.NOT_STARTED
    assert result.assigned_to_id == employee.id
    assert result.assigned_to_name == "Eve Tester"

    stored = db.query(Project).one()
    assert stored.created_by == "maria"
    assert db.query(Log).filter(Log.action == "PROJECT_CREATE").count() == 1


def test_create_keeps_explicit_status(db, manager_caller):
    result = service.create_project(db, _create_request(status=ProjectStatus.IN_PROGRESS), manager_caller)
    assert result.status == ProjectStatus.IN_PROGRESS


def test_employee_cannot_create_project(db, employee_caller):
    with pytest.raises(ForbiddenError):
        service.create_project(db, _create_request(), employee_caller)
    assert db.query(Project).count() == 0


def test_unauthenticated_create_is_rejected(db):
    with pytest.raises(UnauthenticatedError):
        service.create_project(db, _create_request(), None)


@pytest.mark.parametrize("overrides", [
    {"name": "   "},
    {"end_date": TODAY},
    {"end_date": TODAY - timedelta(days=1)},
])
def test_create_validates_fields(db, manager_caller, overrides):
    with pytest.raises(InvalidRequestError):
        service.create_project(db, _create_request(**overrides), manager_caller)
    assert db.query(Project).count() == 0


def test_create_with_unknown_assignee_fails(db, manager_caller):
    with pytest.raises(NotFoundError):
        service.create_project(db, _create_request(assigned_to_id=999), manager_caller)
    assert db.query(Project).count() == 0


def test_end_date_is_checked_against_submission_day(db, manager_caller):
    request = _create_request(end_date=NEXT_MONTH)
    with pytest.raises(InvalidRequestError):
        service.create_project(db, request, manager_caller, today=NEXT_MONTH)


# ---- update ----

def test_partial_update_leaves_absent_fields(db, manager_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee, description="Original")

    result = service.update_project(db, project.id, ProjectUpdate(name="Artemis"), manager_caller)

    assert result.name == "Artemis"
    assert result.description == "Original"
    assert result.assigned_to_id == employee.id
    assert result.priority == PriorityLevel.MEDIUM


def test_partial_update_is_idempotent(db, manager_caller, make_project):
    project = make_project("Apollo")
    patch = ProjectUpdate(priority=PriorityLevel.URGENT, end_date=NEXT_MONTH + timedelta(days=5))

    first = service.update_project(db, project.id, patch, manager_caller)
    second = service.update_project(db, project.id, patch, manager_caller)

    assert first == second
    assert second.priority == PriorityLevel.URGENT


def test_explicit_null_clears_optional_fields(db, manager_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee, description="Original")

    result = service.update_project(
        db, project.id, ProjectUpdate(description=None, assigned_to_id=None), manager_caller,
    )

    assert result.description is None
    assert result.assigned_to_id is None
    assert result.assigned_to_name is None


def test_explicit_null_on_required_field_is_invalid(db, manager_caller, make_project):
    project = make_project("Apollo")
    with pytest.raises(InvalidRequestError):
        service.update_project(db, project.id, ProjectUpdate(name=None), manager_caller)
    db.refresh(project)
    assert project.name == "Apollo"


def test_update_rejects_past_end_date_without_mutation(db, manager_caller, make_project):
    project = make_project("Apollo", end_date=NEXT_MONTH)

    with pytest.raises(InvalidRequestError):
        service.update_project(
            db, project.id, ProjectUpdate(name="Renamed", end_date=TODAY - timedelta(days=1)), manager_caller,
        )

    db.refresh(project)
    assert project.name == "Apollo"
    assert project.end_date == NEXT_MONTH


def test_update_reassigns_project(db, manager_caller, make_project, employee, other_employee):
    project = make_project("Apollo", assignee=employee)
    result = service.update_project(db, project.id, ProjectUpdate(assigned_to_id=other_employee.id), manager_caller)
    assert result.assigned_to_id == other_employee.id


def test_update_with_unknown_assignee_changes_nothing(db, manager_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee)
    with pytest.raises(NotFoundError):
        service.update_project(
            db, project.id, ProjectUpdate(name="Renamed", assigned_to_id=404), manager_caller,
        )
    db.refresh(project)
    assert project.name == "Apollo"
    assert project.assigned_to_id == employee.id


def test_update_missing_project(db, manager_caller):
    with pytest.raises(NotFoundError):
        service.update_project(db, 42, ProjectUpdate(name="x"), manager_caller)


def test_employee_cannot_update_even_own_project(db, employee_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee)
    with pytest.raises(ForbiddenError):
        service.update_project(db, project.id, ProjectUpdate(name="Mine"), employee_caller)


# ---- delete ----

def test_manager_deletes_project(db, manager_caller, make_project):
    project = make_project("Apollo")
    service.delete_project(db, project.id, manager_caller)
    assert db.query(Project).count() == 0


def test_delete_missing_project_is_not_found_and_no_op(db, manager_caller, make_project):
    make_project("Apollo")
    with pytest.raises(NotFoundError):
        service.delete_project(db, 999, manager_caller)
    assert db.query(Project).count() == 1
    assert db.query(Log).filter(Log.action == "PROJECT_DELETE").count() == 0


def test_employee_cannot_delete(db, employee_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee)
    with pytest.raises(ForbiddenError):
        service.delete_project(db, project.id, employee_caller)
    assert db.query(Project).count() == 1


# ---- get ----

def test_get_visibility(db, manager_caller, employee_caller, other_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee)

    assert service.get_project(db, project.id, manager_caller).id == project.id
    assert service.get_project(db, project.id, employee_caller).id == project.id
    with pytest.raises(ForbiddenError):
        service.get_project(db, project.id, other_caller)


def test_get_missing_project_is_not_found_before_forbidden(db, employee_caller):
    with pytest.raises(NotFoundError):
        service.get_project(db, 123, employee_caller)


def test_unassigned_project_is_hidden_from_employees(db, employee_caller, make_project):
    project = make_project("Orphan")
    with pytest.raises(ForbiddenError):
        service.get_project(db, project.id, employee_caller)


# ---- status ----

def test_assignee_updates_status(db, employee_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee)
    result = service.update_project_status(
        db, project.id, ProjectStatusUpdate(status=ProjectStatus.IN_PROGRESS), employee_caller,
    )
    assert result.status == ProjectStatus.IN_PROGRESS
    assert result.name == "Apollo"


def test_unrelated_employee_cannot_update_status(db, other_caller, make_project, employee):
    project = make_project("Apollo", assignee=employee)
    with pytest.raises(ForbiddenError):
        service.update_project_status(db, project.id, ProjectStatusUpdate(status=ProjectStatus.COMPLETED), other_caller)
    db.refresh(project)
    assert project.status == ProjectStatus.NOT_STARTED


def test_manager_updates_status_regardless_of_assignment(db, manager_caller, make_project, employee):
    assigned = make_project("Assigned", assignee=employee)
    unassigned = make_project("Unassigned")
    for project in (assigned, unassigned):
        result = service.update_project_status(
            db, project.id, ProjectStatusUpdate(status=ProjectStatus.COMPLETED), manager_caller,
        )
        assert result.status == ProjectStatus.COMPLETED


def test_status_may_move_backwards(db, manager_caller, make_project):
    project = make_project("Apollo", status=ProjectStatus.COMPLETED)
    result = service.update_project_status(
        db, project.id, ProjectStatusUpdate(status=ProjectStatus.NOT_STARTED), manager_caller,
    )
    assert result.status == ProjectStatus.NOT_STARTED


def test_status_update_on_missing_project(db, manager_caller):
    with pytest.raises(NotFoundError):
        service.update_project_status(db, 5, ProjectStatusUpdate(status=ProjectStatus.COMPLETED), manager_caller)


# ---- listing ----

def test_list_my_projects_pages_in_memory(db, employee_caller, make_project, employee, other_employee):
    for i in range(7):
        make_project(f"Mine {i}", assignee=employee)
    make_project("Someone else's", assignee=other_employee)

    pages = [
        service.list_my_projects(db, employee_caller, PageRequest(page=n, page_size=5))
        for n in range(3)
    ]

    assert [len(p.items) for p in pages] == [5, 2, 0]
    assert all(p.total == 7 for p in pages)
    assert pages[0].total_pages == 2
    assert {item.name for p in pages for item in p.items} == {f"Mine {i}" for i in range(7)}


def test_list_my_projects_unknown_caller(db):
    ghost = Caller(id=99, username="ghost", role=RoleType.EMPLOYEE)
    with pytest.raises(NotFoundError):
        service.list_my_projects(db, ghost, PageRequest())


def test_list_projects_manager_sees_everything(db, manager_caller, make_project, employee):
    make_project("A", assignee=employee)
    make_project("B")
    make_project("C")

    page = service.list_projects(db, manager_caller, PageRequest(page=0, page_size=2))

    assert page.total == 3
    assert [p.name for p in page.items] == ["A", "B"]


def test_list_projects_employee_gets_own_projects(db, employee_caller, make_project, employee):
    make_project("Mine", assignee=employee)
    make_project("Not mine")

    page = service.list_projects(db, employee_caller, PageRequest())

    assert page.total == 1
    assert page.items[0].name == "Mine"


def test_list_projects_sorts_priority_by_rank(db, manager_caller, make_project):
    make_project("low", priority=PriorityLevel.LOW)
    make_project("urgent", priority=PriorityLevel.URGENT)
    make_project("medium", priority=PriorityLevel.MEDIUM)
    make_project("high", priority=PriorityLevel.HIGH)

    page = service.list_projects(db, manager_caller, PageRequest(sort_by="priority", order="desc"))

    assert [p.name for p in page.items] == ["urgent", "high", "medium", "low"]
