# projectmgmt/utils/audit.py
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from projectmgmt.models.log import Log

def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host

# Stage an audit entry; committed together with the caller's transaction
def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None, commit=False):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    if commit:
        db.commit()
    return entry
