"""Tests for Member, Vote and MemberVote models."""

from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.models import Member, MemberVote, Vote


async def add_member_and_vote(db: AsyncSession) -> tuple[Member, Vote]:
    member = Member(name="Test Member", chamber="House", state="OH", district="03", party="D")
    vote = Vote(
        title="Border Security Act",
        congress=119,
        chamber="House",
        vote_date=date(2025, 3, 15),
        category="IMMIGRATION",
        reference_position="NO",
    )
    db.add_all([member, vote])
    await db.commit()
    return member, vote


class TestMemberModel:
    """Tests for the Member model."""

    @pytest.mark.asyncio
    async def test_create_member_defaults(self, db_session: AsyncSession):
        member = Member(name="Jane Doe", chamber="Senate", state="CA", party="D")
        db_session.add(member)
        await db_session.commit()

        assert len(member.id) == 36
        assert member.lifetime_score is None
        assert member.current_score is None
        assert member.trending is False
        assert member.updated_at is not None

    @pytest.mark.asyncio
    async def test_to_dict(self, db_session: AsyncSession):
        member = Member(
            name="John Doe", chamber="House", state="TX", district="07",
            party="R", bioguide_id="D000001", position=3,
        )
        db_session.add(member)
        await db_session.commit()

        data = member.to_dict()
        assert data["name"] == "John Doe"
        assert data["district"] == "07"
        assert data["bioguide_id"] == "D000001"
        assert data["position"] == 3
        assert data["lifetime_score"] is None

    @pytest.mark.asyncio
    async def test_bioguide_id_is_unique(self, db_session: AsyncSession):
        db_session.add(Member(name="A", chamber="House", bioguide_id="X000001"))
        db_session.add(Member(name="B", chamber="House", bioguide_id="X000001"))
        with pytest.raises(IntegrityError):
            await db_session.commit()


class TestVoteModel:
    """Tests for the Vote model."""

    @pytest.mark.asyncio
    async def test_to_dict(self, db_session: AsyncSession):
        _, vote = await add_member_and_vote(db_session)
        data = vote.to_dict()
        assert data["vote_date"] == "2025-03-15"
        assert data["importance_weight"] == 1.0
        assert data["category"] == "IMMIGRATION"
        assert data["reference_position"] == "NO"


class TestMemberVoteModel:
    """Tests for recorded choices and their cascades."""

    @pytest.mark.asyncio
    async def test_one_record_per_member_and_vote(self, db_session: AsyncSession):
        member, vote = await add_member_and_vote(db_session)
        db_session.add(MemberVote(member_id=member.id, vote_id=vote.id, choice="YES"))
        await db_session.commit()

        db_session.add(MemberVote(member_id=member.id, vote_id=vote.id, choice="NO"))
        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_deleting_member_removes_records(self, db_session: AsyncSession):
        member, vote = await add_member_and_vote(db_session)
        db_session.add(MemberVote(member=member, vote=vote, choice="YES"))
        await db_session.commit()

        await db_session.delete(member)
        await db_session.commit()

        result = await db_session.execute(select(MemberVote))
        assert result.scalars().all() == []
        assert await db_session.get(Vote, vote.id) is not None

    @pytest.mark.asyncio
    async def test_deleting_vote_removes_records(self, db_session: AsyncSession):
        member, vote = await add_member_and_vote(db_session)
        db_session.add(MemberVote(member=member, vote=vote, choice="ABSENT"))
        await db_session.commit()

        await db_session.delete(vote)
        await db_session.commit()

        result = await db_session.execute(select(MemberVote))
        assert result.scalars().all() == []
        assert await db_session.get(Member, member.id) is not None

    @pytest.mark.asyncio
    async def test_to_dict(self, db_session: AsyncSession):
        member, vote = await add_member_and_vote(db_session)
        record = MemberVote(member=member, vote=vote, choice="NO", is_current=True)
        db_session.add(record)
        await db_session.commit()

        data = record.to_dict()
        assert data["member_id"] == member.id
        assert data["vote_id"] == vote.id
        assert data["choice"] == "NO"
        assert data["is_current"] is True
        assert data["recorded_at"] is not None
