"""Ledger payload models."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Subject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    color: Optional[str] = None


class StudySessionCreate(BaseModel):
    subject_id: str = Field(min_length=1)
    duration_minutes: int = Field(ge=1)


class SessionRecord(BaseModel):
    """Session as stored by the ledger. Server-assigned fields may be absent."""

    model_config = ConfigDict(extra="ignore")

    subject_id: str
    duration_minutes: int
    id: Optional[Union[str, int]] = None
    credits_earned: Optional[int] = None
    created_at: Optional[str] = None


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    credits: int = 0
    total_study_minutes: int = 0

    @property
    def display_name(self) -> str:
        return self.full_name or self.name or self.username or self.email or "Student"
