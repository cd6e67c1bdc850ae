"""Request bodies for the admin API."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from scorecard.services.scoring import Category, Chamber, VoteChoice


def _definite_position(value):
    if value is VoteChoice.ABSENT:
        raise ValueError("reference_position must be YES or NO")
    return value


class LoginRequest(BaseModel):
    password: Optional[str] = None


class MemberCreate(BaseModel):
    name: str = "New Member"
    chamber: Chamber = Chamber.HOUSE
    state: str = Field(default="", max_length=2)
    district: Optional[str] = None
    party: str = ""
    image_url: Optional[str] = None
    trending: bool = False
    bioguide_id: Optional[str] = None


class MemberUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""

    name: Optional[str] = None
    chamber: Optional[Chamber] = None
    state: Optional[str] = Field(default=None, max_length=2)
    district: Optional[str] = None
    party: Optional[str] = None
    image_url: Optional[str] = None
    trending: Optional[bool] = None
    position: Optional[int] = None
    bioguide_id: Optional[str] = None


class ReorderRequest(BaseModel):
    ids: list[str] = Field(min_length=1)


class VoteCreate(BaseModel):
    title: str = Field(min_length=1)
    congress: int
    chamber: Chamber
    category: Category
    reference_position: VoteChoice
    importance_weight: float = Field(default=1.0, ge=0, allow_inf_nan=False)
    vote_date: Optional[date] = None
    description: Optional[str] = None
    gov_link: Optional[str] = None

    @field_validator("reference_position")
    @classmethod
    def definite_position(cls, value):
        return _definite_position(value)


class VoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    congress: Optional[int] = None
    chamber: Optional[Chamber] = None
    category: Optional[Category] = None
    reference_position: Optional[VoteChoice] = None
    importance_weight: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    vote_date: Optional[date] = None
    description: Optional[str] = None
    gov_link: Optional[str] = None

    @field_validator("reference_position")
    @classmethod
    def definite_position(cls, value):
        return _definite_position(value)


class ChoiceRecord(BaseModel):
    vote_id: str
    choice: VoteChoice
    is_current: Optional[bool] = None
