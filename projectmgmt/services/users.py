# projectmgmt/services/users.py
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from projectmgmt.exceptions import ConflictError, ForbiddenError, InvalidRequestError, NotFoundError
from projectmgmt.models.users import User
from projectmgmt.schemas.common import Page, PageRequest
from projectmgmt.schemas.user import UserCreate, UserResponse, UserUpdate
from projectmgmt.services import policy
from projectmgmt.services.base import fetch_page, require_caller, transaction
from projectmgmt.services.policy import Caller
from projectmgmt.utils.audit import write_log
from projectmgmt.utils.hashing import get_password_hash

logger = logging.getLogger(__name__)

RESOURCE = "users"

# Only managers may change these on any account, including their own
_PRIVILEGED_FIELDS = {"role", "enabled"}


def _require_manager(caller: Optional[Caller], action: str) -> Caller:
    caller = require_caller(caller)
    if not policy.can_manage_users(caller):
        logger.warning("User %s denied %s", caller.username, action)
        raise ForbiddenError("Manager access required")
    return caller


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError.for_entity("User", "id", user_id)
    return user


def _username_exists(db: Session, username: str) -> bool:
    return db.query(User.id).filter(User.username == username).first() is not None


def _email_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(func.lower(User.email) == email.lower()).first() is not None


def create_user(db: Session, request: UserCreate, caller: Optional[Caller], *, ip: Optional[str] = None) -> UserResponse:
    caller = _require_manager(caller, "user creation")
    email = request.email.strip().lower()

    # Uniqueness is checked up front so a conflict never reaches the store
    if _username_exists(db, request.username):
        raise ConflictError("Username already exists")
    if _email_exists(db, email):
        raise ConflictError("Email already exists")

    user = User(
        username=request.username,
        email=email,
        password_hash=get_password_hash(request.password),
        first_name=request.first_name,
        last_name=request.last_name,
        role=request.role,
    )
    user.stamp_created(caller.username)

    with transaction(db):
        db.add(user)
        db.flush()
        write_log(db, user_id=caller.id, action="USER_CREATE", resource=RESOURCE, ip=ip,
                  meta={"target_id": user.id, "username": user.username, "role": user.role.value})
    db.refresh(user)

    logger.info("User %s created by %s", user.username, caller.username)
    return UserResponse.model_validate(user)


def update_user(
    db: Session,
    user_id: int,
    request: UserUpdate,
    caller: Optional[Caller],
    *,
    ip: Optional[str] = None,
) -> UserResponse:
    caller = require_caller(caller)
    changes = {field: getattr(request, field) for field in request.model_fields_set}

    with transaction(db):
        user = _get_user(db, user_id)
        if not policy.can_edit_user(caller, user.username):
            logger.warning("User %s denied update of user %s", caller.username, user.username)
            raise ForbiddenError("You can only update your own profile")
        if not caller.is_manager and _PRIVILEGED_FIELDS & changes.keys():
            raise ForbiddenError("Only managers can change role or account status")

        for field in ("email", "password", "role", "enabled"):
            if field in changes and changes[field] is None:
                raise InvalidRequestError(f"Field '{field}' cannot be null")

        if "email" in changes:
            email = changes["email"].strip().lower()
            if email != user.email.lower() and _email_exists(db, email):
                raise ConflictError("Email already exists")
            user.email = email
        if "password" in changes:
            user.password_hash = get_password_hash(changes["password"])
        for field in ("first_name", "last_name", "role", "enabled"):
            if field in changes:
                setattr(user, field, changes[field])
        user.stamp_updated(caller.username)

        write_log(db, user_id=caller.id, action="USER_UPDATE", resource=RESOURCE, ip=ip,
                  meta={"target_id": user_id, "fields": sorted(changes.keys() - {"password"})})
    db.refresh(user)

    logger.info("User %s updated by %s", user.username, caller.username)
    return UserResponse.model_validate(user)


def delete_user(db: Session, user_id: int, caller: Optional[Caller], *, ip: Optional[str] = None) -> None:
    caller = _require_manager(caller, "user deletion")

    with transaction(db):
        user = _get_user(db, user_id)
        # Prevent self-deletion
        if user.id == caller.id:
            raise InvalidRequestError("You cannot delete your own account")

        unassigned = [p.id for p in user.assigned_projects]
        # Assigned projects survive; the ORM clears their assignee reference
        db.delete(user)
        write_log(db, user_id=caller.id, action="USER_DELETE", resource=RESOURCE, ip=ip,
                  meta={"target_id": user_id, "username": user.username, "unassigned_projects": unassigned})

    logger.info("User %s deleted by %s", user_id, caller.username)


def get_user(db: Session, user_id: int, caller: Optional[Caller]) -> UserResponse:
    _require_manager(caller, "user lookup")
    return UserResponse.model_validate(_get_user(db, user_id))


def list_users(db: Session, caller: Optional[Caller], page: PageRequest) -> Page[UserResponse]:
    _require_manager(caller, "user listing")

    sort_map = {
        "id": User.id,
        "username": User.username,
        "email": User.email,
        "role": User.role,
        "first_name": User.first_name,
        "last_name": User.last_name,
    }
    col = sort_map.get(page.sort_by, User.id)

    query = db.query(User)
    total = query.count()
    ordering = col.asc() if page.order == "asc" else col.desc()
    users = fetch_page(query.order_by(ordering, User.id.asc()), page, total)
    return Page[UserResponse].build([UserResponse.model_validate(u) for u in users], total, page)


def get_current_user(db: Session, caller: Optional[Caller]) -> UserResponse:
    caller = require_caller(caller)
    user = db.query(User).filter(User.username == caller.username).first()
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse.model_validate(user)
