# projectmgmt/routes/users.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from projectmgmt.database import get_db
from projectmgmt.routes.params import page_params
from projectmgmt.schemas.common import ApiResponse, Page, PageRequest, ok
from projectmgmt.schemas.user import UserCreate, UserResponse, UserUpdate
from projectmgmt.services import users as service
from projectmgmt.services.policy import Caller
from projectmgmt.utils.audit import client_ip
from projectmgmt.utils.tokenJWT import get_current_caller

router = APIRouter(prefix="/api/users", tags=["Users"])


# Create a user account (managers only)
@router.post("", response_model=ApiResponse[UserResponse])
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.create_user(db, payload, caller, ip=client_ip(request)))


# Retrieve a page of users (managers only)
@router.get("", response_model=ApiResponse[Page[UserResponse]])
def list_users(
    page: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.list_users(db, caller, page))


# Retrieve current authenticated user details
@router.get("/me", response_model=ApiResponse[UserResponse])
def me(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return ok(service.get_current_user(db, caller))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.get_user(db, user_id, caller))


# Update an account (managers, or the account owner)
@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return ok(service.update_user(db, user_id, payload, caller, ip=client_ip(request)))


# Delete a user account (managers only)
@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    service.delete_user(db, user_id, caller, ip=client_ip(request))
    return ok(message="User deleted successfully")
