# backend/schemas/complaint.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.complaint import ComplaintCategory, ComplaintPriority, ComplaintStatus
from schemas.user import UserSummary


# camelCase on the wire, snake_case in Python
class CamelBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


def _required_text(value: str) -> str:
    if value is None or not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


# Validated input for a new complaint, built from the multipart form
class ComplaintCreate(BaseModel):
    title: str
    description: str
    category: ComplaintCategory
    location: str
    coordinates: Coordinates

    @field_validator("title", "description", "location")
    @classmethod
    def _not_blank(cls, value):
        return _required_text(value)


# Partial update by the owning user; absent fields stay untouched
class ComplaintUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ComplaintCategory] = None
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @field_validator("title", "description", "location")
    @classmethod
    def _not_blank(cls, value):
        if value is None:
            return value
        return _required_text(value)


class StatusUpdate(BaseModel):
    status: str


class PriorityUpdate(BaseModel):
    priority: str


class ComplaintResponse(CamelBase):
    id: int
    title: str
    description: str
    category: ComplaintCategory
    status: ComplaintStatus
    priority: ComplaintPriority
    location: str
    coordinates: Optional[Coordinates] = None
    images: List[str] = []
    user: UserSummary
    assigned_to_id: Optional[int] = Field(default=None, serialization_alias="assignedTo")
    created_at: datetime
    updated_at: datetime


class ImageDeleteResponse(BaseModel):
    message: str
    complaint: ComplaintResponse


class MessageResponse(BaseModel):
    message: str
