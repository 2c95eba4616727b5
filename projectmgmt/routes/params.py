# projectmgmt/routes/params.py
from typing import Literal

from fastapi import Query

from projectmgmt.schemas.common import PageRequest

# Shared pagination/sorting query parameters (page is zero-based)
def page_params(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: str = Query("id"),
    order: Literal["asc", "desc"] = Query("asc"),
) -> PageRequest:
    return PageRequest(page=page, page_size=page_size, sort_by=sort_by, order=order)
