"""Scorecard store: loads snapshots for the scoring engine and keeps stored
member scores in sync with recorded votes.

Stored scores are always recomputed from scratch for the member concerned.
Nothing is patched incrementally, so two overlapping edits touching the same
member converge on the same result whichever commits last.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.config import get_settings
from scorecard.models import Member, MemberVote, Vote
from scorecard.services.scoring import (
    MemberChoice,
    MemberScoreResult,
    ReferenceVote,
    ScoringConfig,
    VoteChoice,
    compute_member_score,
)

logger = logging.getLogger(__name__)

settings = get_settings()

class ScorecardStore:
    """Storage-backed collaborator of the scoring engine."""

    def __init__(self, current_congress: int, scoring_config: ScoringConfig):
        self.current_congress = current_congress
        self.scoring_config = scoring_config

    async def get_votes(self, db: AsyncSession) -> list[ReferenceVote]:
        """Snapshot of the full vote catalog."""
        result = await db.execute(select(Vote).order_by(Vote.id))
        return [self._vote_snapshot(v) for v in result.scalars().all()]

    async def get_member_choices(
        self, db: AsyncSession, member_id: str
    ) -> list[MemberChoice]:
        """Snapshot of every choice recorded for one member."""
        result = await db.execute(
            select(MemberVote).where(MemberVote.member_id == member_id)
        )
        return [
            MemberChoice(
                vote_id=row.vote_id,
                member_id=row.member_id,
                choice=row.choice,
                is_current=row.is_current,
            )
            for row in result.scalars().all()
        ]

    async def score_breakdown(
        self, db: AsyncSession, member_id: str
    ) -> tuple[MemberScoreResult, MemberScoreResult]:
        """Compute lifetime and current-session scores for a member.

        Returns:
            Tuple of (lifetime, current) results
        """
        votes = await self.get_votes(db)
        choices = await self.get_member_choices(db, member_id)
        lifetime = compute_member_score(
            member_id, votes, choices, config=self.scoring_config
        )
        current = compute_member_score(
            member_id, votes, choices,
            congress=self.current_congress, config=self.scoring_config,
        )
        return lifetime, current

    async def recompute_member(
        self, db: AsyncSession, member_id: str, commit: bool = True
    ) -> Optional[Member]:
        """Recompute and store a member's lifetime and current overall scores."""
        member = await db.get(Member, member_id)
        if member is None:
            return None

        lifetime, current = await self.score_breakdown(db, member_id)
        member.lifetime_score = lifetime.overall
        member.current_score = current.overall
        logger.debug(
            "Recomputed member %s: lifetime=%s current=%s",
            member_id, lifetime.overall, current.overall,
        )

        if commit:
            await db.commit()
        return member

    async def member_ids(self, db: AsyncSession) -> list[str]:
        result = await db.execute(select(Member.id).order_by(Member.id))
        return list(result.scalars().all())

    async def recompute_all(self, db: AsyncSession) -> int:
        """Recompute every member's stored scores. Returns the member count."""
        member_ids = await self.member_ids(db)
        await self._recompute_many(db, member_ids)
        logger.info("Recomputed scores for %d members", len(member_ids))
        return len(member_ids)

    async def upsert_choice(
        self,
        db: AsyncSession,
        member_id: str,
        vote_id: str,
        choice: VoteChoice,
        is_current: Optional[bool] = None,
    ) -> Optional[MemberVote]:
        """Record a member's choice on a vote, replacing any earlier one.

        When is_current is omitted, a new record is flagged current if the
        vote belongs to the current congress, and an existing record keeps
        its flag.

        Returns:
            The stored record, or None if the member or vote does not exist
        """
        member = await db.get(Member, member_id)
        vote = await db.get(Vote, vote_id)
        if member is None or vote is None:
            return None

        choice = VoteChoice(choice)
        result = await db.execute(
            select(MemberVote).where(
                MemberVote.member_id == member_id,
                MemberVote.vote_id == vote_id,
            )
        )
        record = result.scalar_one_or_none()

        if record:
            record.choice = choice.value
            if is_current is not None:
                record.is_current = is_current
        else:
            if is_current is None:
                is_current = vote.congress == self.current_congress
            record = MemberVote(
                member=member,
                vote=vote,
                choice=choice.value,
                is_current=is_current,
            )
            db.add(record)

        await db.flush()
        await self.recompute_member(db, member_id, commit=False)
        await db.commit()
        await db.refresh(record)
        return record

    async def delete_choice(
        self, db: AsyncSession, member_id: str, vote_id: str
    ) -> bool:
        """Remove a member's recorded choice. Returns False if none existed."""
        result = await db.execute(
            select(MemberVote).where(
                MemberVote.member_id == member_id,
                MemberVote.vote_id == vote_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            return False

        await db.delete(record)
        await db.flush()
        await self.recompute_member(db, member_id, commit=False)
        await db.commit()
        await self._refresh_choices(db, [member_id], vote_id)
        return True

    async def affected_member_ids(self, db: AsyncSession, vote_id: str) -> list[str]:
        """IDs of members with a recorded choice on a vote."""
        result = await db.execute(
            select(MemberVote.member_id)
            .where(MemberVote.vote_id == vote_id)
            .distinct()
        )
        return list(result.scalars().all())

    async def on_vote_changed(self, db: AsyncSession, vote_id: str) -> list[str]:
        """Recompute every member after a vote was added or edited.

        A member without a record on the vote scores it as absent, so the
        change reaches members who never voted on it too.

        Returns:
            IDs of the recomputed members
        """
        member_ids = await self.member_ids(db)
        await self._recompute_many(db, member_ids)
        logger.info("Vote %s changed, recomputed %d members", vote_id, len(member_ids))
        return member_ids

    async def delete_vote(self, db: AsyncSession, vote_id: str) -> Optional[Vote]:
        """Delete a vote with its recorded choices, then recompute every member.

        Returns:
            The deleted vote, or None if it did not exist
        """
        vote = await db.get(Vote, vote_id)
        if vote is None:
            return None

        voted = await self.affected_member_ids(db, vote_id)
        await db.delete(vote)
        await db.flush()
        member_ids = await self.member_ids(db)
        await self._recompute_many(db, member_ids)
        await self._refresh_choices(db, voted)
        logger.info("Vote %s deleted, recomputed %d members", vote_id, len(member_ids))
        return vote

    async def _recompute_many(self, db: AsyncSession, member_ids: list[str]) -> None:
        for member_id in member_ids:
            await self.recompute_member(db, member_id, commit=False)
        await db.commit()

    async def _refresh_choices(
        self, db: AsyncSession, member_ids: list[str], vote_id: Optional[str] = None
    ) -> None:
        # Drop deleted records from choice collections already loaded in the session
        for member_id in member_ids:
            member = await db.get(Member, member_id)
            if member is not None:
                await db.refresh(member, attribute_names=["choices"])
        if vote_id is not None:
            vote = await db.get(Vote, vote_id)
            if vote is not None:
                await db.refresh(vote, attribute_names=["choices"])

    def _vote_snapshot(self, vote: Vote) -> ReferenceVote:
        return ReferenceVote(
            id=vote.id,
            congress=vote.congress,
            chamber=vote.chamber,
            category=vote.category,
            reference_position=vote.reference_position,
            importance_weight=vote.importance_weight,
            vote_date=vote.vote_date,
        )

scorecard_store = ScorecardStore(
    current_congress=settings.current_congress,
    scoring_config=settings.scoring_config,
)
