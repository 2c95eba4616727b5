from projectmgmt.models.users import User, RoleType
from projectmgmt.models.project import Project, PriorityLevel, ProjectStatus
from projectmgmt.models.log import Log

__all__ = ["User", "RoleType", "Project", "PriorityLevel", "ProjectStatus", "Log"]
