# projectmgmt/routes/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from projectmgmt.database import get_db
from projectmgmt.schemas.common import ApiResponse, ok
from projectmgmt.schemas.user import JwtResponse, LoginRequest
from projectmgmt.services import auth as service
from projectmgmt.utils.audit import client_ip

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse[JwtResponse])
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    return ok(service.login(db, payload, ip=client_ip(request)))


# Tokens are stateless; the client discards its copy
@router.post("/logout", response_model=ApiResponse[None])
def logout():
    return ok(message="Logged out successfully")
