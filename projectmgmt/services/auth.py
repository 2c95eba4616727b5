# projectmgmt/services/auth.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from projectmgmt.exceptions import UnauthenticatedError
from projectmgmt.models.users import User
from projectmgmt.schemas.user import JwtResponse, LoginRequest
from projectmgmt.utils.audit import write_log
from projectmgmt.utils.hashing import verify_password
from projectmgmt.utils.tokenJWT import create_access_token

logger = logging.getLogger(__name__)


# Authenticate user and issue JWT token
def login(db: Session, payload: LoginRequest, *, ip: Optional[str] = None) -> JwtResponse:
    db_user = db.query(User).filter(User.username == payload.username).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"username": payload.username}, commit=True)
        logger.warning("Failed login for %s", payload.username)
        raise UnauthenticatedError("Invalid username or password")

    if not db_user.enabled:
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="FAIL", ip=ip,
                  meta={"username": payload.username, "reason": "disabled"}, commit=True)
        raise UnauthenticatedError("Account is disabled")

    access_token = create_access_token(data={"sub": db_user.username, "role": db_user.role.value})

    # Log successful login event
    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="SUCCESS", ip=ip,
              meta={"username": db_user.username}, commit=True)

    return JwtResponse(
        token=access_token,
        id=db_user.id,
        username=db_user.username,
        email=db_user.email,
        role=db_user.role,
    )
