"""Reference vote database model."""

from datetime import datetime, date
from typing import Optional

from sqlalchemy import String, Text, DateTime, Date, Integer, Float
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scorecard.database import Base
from scorecard.models.member import new_id


class Vote(Base):
    """A bill or roll call with the organization's position on it."""

    __tablename__ = "votes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(Text)
    congress: Mapped[int] = mapped_column(Integer, index=True)
    chamber: Mapped[str] = mapped_column(String(20))
    vote_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    category: Mapped[str] = mapped_column(String(20), index=True)
    reference_position: Mapped[str] = mapped_column(String(10))
    importance_weight: Mapped[float] = mapped_column(Float, default=1.0)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gov_link: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    choices: Mapped[list["MemberVote"]] = relationship(
        back_populates="vote", cascade="all, delete-orphan", lazy="selectin"
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "congress": self.congress,
            "chamber": self.chamber,
            "vote_date": self.vote_date.isoformat() if self.vote_date else None,
            "category": self.category,
            "reference_position": self.reference_position,
            "importance_weight": self.importance_weight,
            "description": self.description,
            "gov_link": self.gov_link,
        }


from scorecard.models.member_vote import MemberVote
