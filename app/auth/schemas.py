from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.core.schemas import CamelModel


class AdminLogin(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class AdminSummary(CamelModel):
    id: str
    username: str
    email: str
    role: str
    last_login: Optional[datetime] = None


class AdminProfile(AdminSummary):
    is_active: bool
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    token: str
    admin: AdminSummary
