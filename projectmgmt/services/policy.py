# projectmgmt/services/policy.py
"""Authorization rules for projects and user accounts.

Pure predicates: they never raise and never touch the database. Every
function accepts ``None`` for an unauthenticated caller and denies it.
"""
from dataclasses import dataclass
from typing import Optional

from projectmgmt.models.project import Project
from projectmgmt.models.users import RoleType, User


@dataclass(frozen=True)
class Caller:
    """Identity resolved from the authenticated session."""

    id: int
    username: str
    role: RoleType

    @property
    def is_manager(self) -> bool:
        return self.role == RoleType.MANAGER

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        return cls(id=user.id, username=user.username, role=RoleType(user.role))


def _is_manager(caller: Optional[Caller]) -> bool:
    return caller is not None and caller.is_manager


def _is_assignee(caller: Optional[Caller], project: Project) -> bool:
    if caller is None or project.assigned_to is None:
        return False
    return project.assigned_to.username == caller.username


def can_create_project(caller: Optional[Caller]) -> bool:
    return _is_manager(caller)


def can_edit_project(caller: Optional[Caller]) -> bool:
    return _is_manager(caller)


def can_delete_project(caller: Optional[Caller]) -> bool:
    return _is_manager(caller)


def can_view_project(caller: Optional[Caller], project: Project) -> bool:
    return _is_manager(caller) or _is_assignee(caller, project)


def can_change_status(caller: Optional[Caller], project: Project) -> bool:
    return can_view_project(caller, project)


def can_edit_user(caller: Optional[Caller], target_username: str) -> bool:
    if caller is None:
        return False
    return caller.is_manager or caller.username == target_username


def can_manage_users(caller: Optional[Caller]) -> bool:
    return _is_manager(caller)
