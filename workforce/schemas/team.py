# workforce/schemas/team.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from workforce.schemas.common import CamelModel, UserRef


class TeamCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    manager_id: Optional[int] = None
    member_ids: List[int] = []


class TeamMemberAdd(CamelModel):
    user_id: int


class TeamOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    manager_id: Optional[int] = None
    manager: Optional[UserRef] = None
    members: List[UserRef] = []
    created_at: datetime


class BoardCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    team_id: int
    color: Optional[str] = Field(default=None, max_length=20)


class BoardOut(CamelModel):
    id: int
    team_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    color: str
    is_active: bool
    created_by: Optional[int] = None
    created_at: datetime
