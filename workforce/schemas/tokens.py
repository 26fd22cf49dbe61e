# workforce/schemas/tokens.py
from typing import Optional

from pydantic import Field

from workforce.schemas.common import CamelModel
from workforce.schemas.user import UserOut, UserProfile


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: Optional[str] = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int


class AuthResponse(CamelModel):
    message: str
    user: UserOut
    tokens: TokenPair


class LoginResponse(CamelModel):
    message: str
    user: UserProfile
    tokens: TokenPair


class RefreshResponse(CamelModel):
    message: str
    tokens: TokenPair


class MeResponse(CamelModel):
    user: UserProfile
