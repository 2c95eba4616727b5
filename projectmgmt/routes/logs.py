# projectmgmt/routes/logs.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from projectmgmt.database import get_db
from projectmgmt.exceptions import ForbiddenError, InvalidRequestError
from projectmgmt.models.log import Log
from projectmgmt.routes.params import page_params
from projectmgmt.schemas.common import ApiResponse, Page, PageRequest, ok
from projectmgmt.schemas.log import LogResponse
from projectmgmt.services import policy
from projectmgmt.services.base import fetch_page
from projectmgmt.services.policy import Caller
from projectmgmt.utils.tokenJWT import get_current_caller

router = APIRouter(prefix="/api/logs", tags=["Logs"])


def _parse_day(value: str, end_of_day: bool = False) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise InvalidRequestError(f"Invalid date: '{value}'")
    # A bare YYYY-MM-DD upper bound covers the whole final day
    if end_of_day and len(value) == 10:
        parsed = parsed.replace(hour=23, minute=59, second=59)
    return parsed


@router.get("", response_model=ApiResponse[Page[LogResponse]])
def get_logs(
    page: PageRequest = Depends(page_params),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by acting user ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    if not policy.can_manage_users(caller):
        raise ForbiddenError("Only managers can view the audit log")

    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status.upper())
    if date_from:
        query = query.filter(Log.ts >= _parse_day(date_from))
    if date_to:
        query = query.filter(Log.ts <= _parse_day(date_to, end_of_day=True))

    # Newest first
    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = fetch_page(query, page, total)

    return ok(Page[LogResponse].build([LogResponse.model_validate(entry) for entry in logs], total, page))
