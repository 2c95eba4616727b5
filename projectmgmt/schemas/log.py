# projectmgmt/schemas/log.py
from datetime import datetime
from typing import Any, Optional

from projectmgmt.schemas.common import ORMBase

# Output schema for a single audit log entry
class LogResponse(ORMBase):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None
