from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.user import UserRole
from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.USER
    group_id: Optional[int] = None


class UserUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    password: Optional[str] = Field(None, min_length=6)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    group_id: Optional[int] = None
    is_active: Optional[bool] = None


class UserResponse(CamelModel):
    """Never carries the password hash."""
    id: int
    username: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    group_id: Optional[int] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserGroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: List[str] = []


class UserGroupUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[List[str]] = None
    is_active: Optional[bool] = None


class UserGroupResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    permissions: List[str] = []
    is_active: bool
