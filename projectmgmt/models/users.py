# projectmgmt/models/users.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, Enum
from sqlalchemy.orm import relationship
from projectmgmt.database import Base
from projectmgmt.models.audit import AuditMixin

# System roles; managers have unrestricted rights over projects and users
class RoleType(str, enum.Enum):
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"

# Represents a user account with authentication details and system role
class User(AuditMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    role = Column(Enum(RoleType), nullable=False)
    enabled = Column(Boolean, nullable=False)

    # Back-reference only; deleting a user unassigns its projects
    assigned_projects = relationship("Project", back_populates="assigned_to")

    def __init__(self, **kwargs):
        if kwargs.get("role") is None:
            kwargs["role"] = RoleType.EMPLOYEE
        if kwargs.get("enabled") is None:
            kwargs["enabled"] = True
        super().__init__(**kwargs)

    @property
    def display_name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.username
