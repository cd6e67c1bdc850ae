"""Recorded member choice on a reference vote."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scorecard.database import Base
from scorecard.models.member import new_id


class MemberVote(Base):
    """How one member voted on one reference vote.

    At most one row exists per (member, vote) pair; re-recording a choice
    replaces the row's choice in place. A missing row is scored as absent.
    """

    __tablename__ = "member_votes"

    __table_args__ = (
        UniqueConstraint("member_id", "vote_id", name="uq_member_vote"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    member_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("members.id", ondelete="CASCADE"), index=True
    )
    vote_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("votes.id", ondelete="CASCADE"), index=True
    )
    choice: Mapped[str] = mapped_column(String(10))
    is_current: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    member: Mapped["Member"] = relationship(back_populates="choices", lazy="selectin")
    vote: Mapped["Vote"] = relationship(back_populates="choices", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "member_id": self.member_id,
            "vote_id": self.vote_id,
            "choice": self.choice,
            "is_current": self.is_current,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }


from scorecard.models.member import Member
from scorecard.models.vote import Vote
