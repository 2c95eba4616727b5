# projectmgmt/schemas/project.py
from datetime import date
from typing import Optional

from pydantic import Field

from projectmgmt.models.project import PriorityLevel, Project, ProjectStatus
from projectmgmt.schemas.common import ORMBase


# Schema for creating a new project (managers only)
class ProjectCreate(ORMBase):
    name: str = Field(..., max_length=100, description="Project name")
    description: Optional[str] = None
    start_date: date
    end_date: date
    assigned_to_id: Optional[int] = None
    priority: PriorityLevel
    status: Optional[ProjectStatus] = None


# Schema for project updates.
# Only fields sent in the body are applied (see ``model_fields_set``); an
# explicit null clears optional fields and is rejected for required ones.
class ProjectUpdate(ORMBase):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    assigned_to_id: Optional[int] = None
    priority: Optional[PriorityLevel] = None


# Schema for the status-only update available to assignees
class ProjectStatusUpdate(ORMBase):
    status: ProjectStatus


# Output schema for project details
class ProjectResponse(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    assigned_to_id: Optional[int] = None
    assigned_to_name: Optional[str] = None
    priority: PriorityLevel
    status: ProjectStatus

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        assignee = project.assigned_to
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            start_date=project.start_date,
            end_date=project.end_date,
            assigned_to_id=assignee.id if assignee else None,
            assigned_to_name=assignee.display_name if assignee else None,
            priority=project.priority,
            status=project.status,
        )
