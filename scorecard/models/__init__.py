"""Database models."""

from scorecard.models.member import Member
from scorecard.models.vote import Vote
from scorecard.models.member_vote import MemberVote

__all__ = [
    "Member",
    "Vote",
    "MemberVote",
]
