# workforce/schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from workforce.config import SecurityConfig
from workforce.models.enums import Role, UserStatus
from workforce.schemas.common import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=SecurityConfig.PASSWORD_MIN_LENGTH, max_length=SecurityConfig.PASSWORD_MAX_LENGTH)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Role = Role.EMPLOYEE
    phone: Optional[str] = Field(default=None, max_length=50)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=SecurityConfig.PASSWORD_MAX_LENGTH)


class UserUpdate(CamelModel):
    """Admin-only changes to another account"""

    role: Optional[Role] = None
    status: Optional[UserStatus] = None


class TeamBrief(CamelModel):
    id: int
    name: str


class UserOut(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    name: str
    role: Role
    status: UserStatus
    phone: Optional[str] = None
    timezone: str
    avatar_url: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserProfile(UserOut):
    teams: List[TeamBrief] = []
    team_ids: List[int] = []
    unread_notifications: int = 0


class UserBasic(CamelModel):
    """Entry of the assignee picker"""

    id: int
    name: str
    email: str
    role: Role
