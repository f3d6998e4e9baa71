import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ProviderCreate(BaseModel):
    first_name: str = Field(..., max_length=255)
    middle_name: str | None = Field(default=None, max_length=255)
    last_name: str = Field(..., max_length=255)
    degree: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    notes: str | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _required_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("First and last name are required.")
        return value

    @field_validator("middle_name", "degree", "email", "phone", "notes")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class ProviderRead(BaseModel):
    id: uuid.UUID
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    degree: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
