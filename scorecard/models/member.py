"""Member database model."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Float, Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scorecard.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Member(Base):
    """A legislator tracked on the scorecard."""

    __tablename__ = "members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bioguide_id: Mapped[Optional[str]] = mapped_column(
        String(10), unique=True, index=True, nullable=True
    )
    name: Mapped[str] = mapped_column(String(200))
    chamber: Mapped[str] = mapped_column(String(20))
    state: Mapped[str] = mapped_column(String(2), default="")
    district: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    party: Mapped[str] = mapped_column(String(20), default="")

    # Written by score recompute, never by admins
    lifetime_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    current_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    trending: Mapped[bool] = mapped_column(Boolean, default=False)
    position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    choices: Mapped[list["MemberVote"]] = relationship(
        back_populates="member", cascade="all, delete-orphan", lazy="selectin"
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bioguide_id": self.bioguide_id,
            "name": self.name,
            "chamber": self.chamber,
            "state": self.state,
            "district": self.district,
            "party": self.party,
            "lifetime_score": self.lifetime_score,
            "current_score": self.current_score,
            "image_url": self.image_url,
            "trending": self.trending,
            "position": self.position,
        }


# Import at bottom to avoid circular imports
from scorecard.models.member_vote import MemberVote
