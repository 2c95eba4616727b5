# projectmgmt/models/audit.py
from sqlalchemy import Column, String, DateTime, func

# Auditor recorded when no authenticated caller exists (bootstrap, migrations)
SYSTEM_AUDITOR = "SYSTEM"

# Creation/modification bookkeeping shared by users and projects
class AuditMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)

    def stamp_created(self, auditor=None):
        self.created_by = auditor or SYSTEM_AUDITOR
        self.updated_by = self.created_by

    def stamp_updated(self, auditor=None):
        self.updated_by = auditor or SYSTEM_AUDITOR
