from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class StaffUser(BaseModel):
    """Sanitized projection of a staff account, the only shape sent to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    organization: str = ""
    phone: str = ""
    created_at: datetime


class StaffAccount(BaseModel):
    """Full account record as held by a credential store."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str = Field(repr=False)
    role: str = "staff"
    organization: str = ""
    phone: str = ""
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; stored values are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_public(self) -> StaffUser:
        return StaffUser(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            role=self.role,
            organization=self.organization or "",
            phone=self.phone or "",
            created_at=self.created_at,
        )
