from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


# Fixed skill axes for performance analysis, in display order.
SKILLS = ("Technique", "Power", "Speed", "Accuracy", "Consistency")
FULL_MARK = 100


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    # Prior turns as plain strings; flattened into one context block.
    history: List[str] = Field(default_factory=list)


class ChatResponse(BaseModel):
    message: str


class AnalysisRequest(BaseModel):
    sport: str = Field(min_length=1)
    description: str = Field(min_length=1)


class SkillScore(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    skill: str
    value: int = Field(ge=0, le=FULL_MARK)
    full_mark: int = Field(default=FULL_MARK, alias="fullMark")

    @model_validator(mode="after")
    def _value_within_full_mark(self):
        if self.value > self.full_mark:
            raise ValueError(f"{self.skill} value {self.value} exceeds fullMark {self.full_mark}")
        return self


class AnalysisResult(BaseModel):
    """Structured performance analysis; serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    score: int = Field(ge=0, le=100)
    insights: List[str]
    skill_breakdown: List[SkillScore] = Field(alias="skillBreakdown")
    improvement: Optional[int] = None
    is_related: Optional[bool] = Field(default=None, alias="isRelated")

    @model_validator(mode="after")
    def _fixed_skill_axes(self):
        names = tuple(s.skill for s in self.skill_breakdown)
        if names != SKILLS:
            raise ValueError(f"skillBreakdown must list {', '.join(SKILLS)} in order (got {', '.join(names)})")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    status: str
    timestamp: str


# Auth

class SendOTPRequest(BaseModel):
    email: EmailStr


class SendOTPResponse(BaseModel):
    success: bool
    message: str


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=4, max_length=10)


class UserIdentity(BaseModel):
    email: str


class TokenResponse(BaseModel):
    token: str
    user: UserIdentity


# Profile

class ProfileUpdate(BaseModel):
    """Schema for updating the athlete profile"""
    name: Optional[str] = None
    sport: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    location: Optional[str] = None


class Profile(ProfileUpdate):
    email: str
    updated_at: Optional[datetime] = None


# Events

class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    sport: str = Field(min_length=1)
    starts_at: datetime
    location: Optional[str] = None
    description: Optional[str] = None

    @field_validator("starts_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive times are taken as UTC so stored events stay comparable.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Event(EventCreate):
    id: str
    organizer_email: str
    created_at: datetime


# Payments

class CheckoutResponse(BaseModel):
    url: str
