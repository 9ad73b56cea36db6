from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .staff import StaffUser


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Required fields are optional here so the services can report them by name
class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserRegister(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    organization: Optional[str] = None
    phone: Optional[str] = None


class AuthRequest(UserRegister):
    """Body of the combined endpoint: a login or register payload plus ``action``."""

    action: Optional[str] = None


class SessionAction(CamelModel):
    action: Optional[str] = None


class TokenResponse(CamelModel):
    token: str
    user: StaffUser
    message: str


class SessionResponse(CamelModel):
    user: StaffUser
    is_authenticated: bool = True


class MessageResponse(CamelModel):
    message: str


class SkippedAccount(CamelModel):
    email: str
    reason: str


class SeedSummary(CamelModel):
    created: int
    skipped: int
    total: int


class SeedResult(CamelModel):
    message: str = "Demo data seeding completed"
    summary: SeedSummary
    created_users: List[StaffUser]
    skipped_users: List[SkippedAccount]
