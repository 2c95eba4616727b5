# projectmgmt/services/base.py
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.orm import Query, Session

from projectmgmt.exceptions import UnauthenticatedError
from projectmgmt.schemas.common import PageRequest
from projectmgmt.services.policy import Caller

@contextmanager
def transaction(db: Session):
    """Commit the work done in the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise

def require_caller(caller: Optional[Caller]) -> Caller:
    if caller is None:
        raise UnauthenticatedError("Authentication is required")
    return caller

def fetch_page(query: Query, page: PageRequest, total: int) -> List:
    # Pages past the last row are empty; the offset never reaches the database
    if page.offset >= total:
        return []
    return query.offset(page.offset).limit(page.limit).all()
