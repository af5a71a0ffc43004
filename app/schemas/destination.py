"""Destination-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} cannot be empty")
    return value


class DestinationCreate(BaseModel):
    """Schema for creating a destination."""

    name: str = Field(..., max_length=100)
    description: str
    price: int = Field(..., gt=0)  # per person per day
    image: str = Field(..., max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v, "Destination name")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _strip_required(v, "Description")

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: str) -> str:
        return _strip_required(v, "Image filename")


class DestinationUpdate(BaseModel):
    """Schema for updating a destination."""

    name: str | None = Field(None, max_length=100)
    description: str | None = None
    price: int | None = Field(None, gt=0)
    image: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return v if v is None else _strip_required(v, "Destination name")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return v if v is None else _strip_required(v, "Description")

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: str | None) -> str | None:
        return v if v is None else _strip_required(v, "Image filename")


class DestinationResponse(BaseModel):
    """Schema for destination response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    price: int
    image: str
    created_at: datetime
    updated_at: datetime


class DestinationDeleteResponse(BaseModel):
    """Schema for destination deletion response."""

    message: str
    deleted_destination: str
