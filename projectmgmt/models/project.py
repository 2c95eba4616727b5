# projectmgmt/models/project.py
import enum
from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey, Enum
from sqlalchemy.orm import relationship
from projectmgmt.database import Base
from projectmgmt.models.audit import AuditMixin

# Ordered priority scale, lowest first
class PriorityLevel(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return list(PriorityLevel).index(self)

# Any status may follow any other; no transition graph is enforced
class ProjectStatus(str, enum.Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

# Represents a project optionally assigned to a single responsible user
class Project(AuditMixin, Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    priority = Column(Enum(PriorityLevel), nullable=False)
    status = Column(Enum(ProjectStatus), nullable=False)

    assigned_to = relationship("User", back_populates="assigned_projects", lazy="joined")

    def __init__(self, **kwargs):
        if kwargs.get("status") is None:
            kwargs["status"] = ProjectStatus.NOT_STARTED
        super().__init__(**kwargs)
