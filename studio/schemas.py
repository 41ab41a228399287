"""Request and response schemas for the HTTP surface."""
from __future__ import annotations

from datetime import datetime
from typing import TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_input(schema: type[SchemaT], **data) -> SchemaT:
    """Build ``schema`` from ``data``, raising the domain ``ValidationError``."""
    try:
        return schema(**data)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(problems) from e


# === Inputs ===

class ContactCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    company: str | None = Field(default=None, max_length=255)
    service: str | None = Field(default=None, max_length=255)
    message: str = Field(min_length=1)


class SubscribeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    email: EmailStr


class ProjectCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    date: datetime | None = None
    featured: bool = False


class PostCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1)
    author: str = Field(min_length=1, max_length=255)
    published_at: datetime | None = None


class SocialLinks(BaseModel):
    """Fixed-shape social profile links for a team member."""
    model_config = ConfigDict(extra="forbid")

    instagram: str | None = None
    linkedin: str | None = None
    twitter: str | None = None


class TeamMemberCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    role: str = Field(min_length=1, max_length=255)
    bio: str = Field(min_length=1)
    social: SocialLinks = Field(default_factory=SocialLinks)


def parse_social(raw: str | None) -> SocialLinks:
    """Parse the JSON ``social`` form field.

    Absent or blank input gives an empty record; anything else must be a
    JSON object with only the known keys.
    """
    if raw is None or not raw.strip():
        return SocialLinks()
    try:
        return SocialLinks.model_validate_json(raw)
    except pydantic.ValidationError as e:
        raise ValidationError(f"social: {e.errors()[0]['msg']}") from e


# === Outputs ===

class RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class ContactOut(RecordOut):
    name: str
    email: str
    company: str | None = None
    service: str | None = None
    message: str
    submitted_at: datetime


class SubscriberOut(RecordOut):
    email: str
    subscribed_at: datetime


class ProjectOut(RecordOut):
    title: str
    category: str
    description: str
    image: str | None = None
    date: datetime
    featured: bool


class PostOut(RecordOut):
    title: str
    category: str
    content: str
    image: str | None = None
    author: str
    published_at: datetime


class TeamMemberOut(RecordOut):
    name: str
    role: str
    image: str | None = None
    bio: str
    social: SocialLinks


class SearchResponse(BaseModel):
    projects: list[ProjectOut]
    posts: list[PostOut]


class StatsResponse(BaseModel):
    projects: int
    posts: int
    contacts: int
    subscribers: int
    team: int


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: str | None = None
    record_id: str | None = None
