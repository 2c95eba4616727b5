# projectmgmt/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from projectmgmt.models.users import RoleType
from projectmgmt.schemas.common import ORMBase

# Schema for user authentication credentials
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

# Schema for account creation requests (managers only)
class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    role: Optional[RoleType] = None  # EMPLOYEE when omitted

# Schema for partial account updates; only sent fields are applied
class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    role: Optional[RoleType] = None
    enabled: Optional[bool] = None

# Output schema for user profile details
class UserResponse(ORMBase):
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: RoleType
    enabled: bool

# Schema for JWT authentication token response
class JwtResponse(BaseModel):
    token: str
    type: str = "Bearer"
    id: int
    username: str
    email: str
    role: RoleType

# Schema for JWT payload contents
class TokenData(BaseModel):
    username: Optional[str] = None
    role: Optional[str] = None
