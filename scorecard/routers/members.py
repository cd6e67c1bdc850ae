"""Routes for members, their recorded votes and their scores."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.database import get_db
from scorecard.models import Member, MemberVote, Vote
from scorecard.schemas import ChoiceRecord, MemberCreate, MemberUpdate, ReorderRequest
from scorecard.services.auth import require_admin
from scorecard.services.scorecard import scorecard_store
from scorecard.services.scoring import Chamber

router = APIRouter(prefix="/api/members", tags=["members"])

REQUIRED_FIELDS = {"name", "chamber", "state", "party", "trending"}


def _not_found(message: str = "Not found") -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=404)


def matches_query(member: Member, query: str) -> bool:
    """Case-insensitive substring match over the member's display fields."""
    text = " ".join(
        part or ""
        for part in (member.name, member.state, member.district, member.party, member.chamber)
    ).lower()
    return query.strip().lower() in text


async def list_members(
    db: AsyncSession, q: Optional[str] = None, chamber: Optional[Chamber] = None
) -> list[Member]:
    """Members in display order, optionally filtered by chamber and search text."""
    stmt = select(Member).order_by(
        Member.position.is_(None), Member.position, Member.name
    )
    if chamber:
        stmt = stmt.where(Member.chamber == chamber.value)
    result = await db.execute(stmt)
    members = list(result.scalars().all())

    if q and q.strip():
        members = [m for m in members if matches_query(m, q)]
    return members


@router.get("")
async def get_members(
    q: Optional[str] = Query(default=None, description="Search text"),
    chamber: Optional[Chamber] = Query(default=None, description="House or Senate"),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    members = await list_members(db, q=q, chamber=chamber)
    return JSONResponse(content=[m.to_dict() for m in members])


@router.post("", status_code=201)
async def create_member(
    body: MemberCreate,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    result = await db.execute(select(func.coalesce(func.max(Member.position), 0)))
    next_position = (result.scalar_one() or 0) + 1

    member = Member(
        bioguide_id=body.bioguide_id,
        name=body.name,
        chamber=body.chamber.value,
        state=body.state,
        district=body.district,
        party=body.party,
        image_url=body.image_url,
        trending=body.trending,
        position=next_position,
    )
    db.add(member)
    await db.flush()
    # Every existing vote counts as absent until choices are recorded
    await scorecard_store.recompute_member(db, member.id)
    await db.refresh(member)
    return JSONResponse(content=member.to_dict(), status_code=201)


@router.post("/reorder")
async def reorder_members(
    body: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    """Set display positions from the order of the given IDs."""
    for position, member_id in enumerate(body.ids, start=1):
        await db.execute(
            update(Member).where(Member.id == member_id).values(position=position)
        )
    await db.commit()
    return JSONResponse(content={"success": True})


@router.get("/{member_id}")
async def get_member(member_id: str, db: AsyncSession = Depends(get_db)) -> JSONResponse:
    member = await db.get(Member, member_id)
    if member is None:
        return _not_found()
    return JSONResponse(content=member.to_dict())


@router.put("/{member_id}")
async def update_member(
    member_id: str,
    body: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        return JSONResponse(content={"error": "No valid fields to update"}, status_code=400)
    null_fields = sorted(k for k in REQUIRED_FIELDS & updates.keys() if updates[k] is None)
    if null_fields:
        return JSONResponse(
            content={"error": f"Fields cannot be null: {', '.join(null_fields)}"},
            status_code=400,
        )

    member = await db.get(Member, member_id)
    if member is None:
        return _not_found()

    for key, value in updates.items():
        if isinstance(value, Chamber):
            value = value.value
        setattr(member, key, value)
    await db.commit()
    await db.refresh(member)
    return JSONResponse(content=member.to_dict())


@router.delete("/{member_id}")
async def delete_member(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    """Delete a member together with their recorded votes."""
    member = await db.get(Member, member_id)
    if member is None:
        return _not_found()

    payload = member.to_dict()
    await db.delete(member)
    await db.commit()
    return JSONResponse(content=payload)


@router.get("/{member_id}/scores")
async def get_member_scores(
    member_id: str, db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Lifetime and current-congress scores with the per-category breakdown."""
    member = await db.get(Member, member_id)
    if member is None:
        return _not_found()

    lifetime, current = await scorecard_store.score_breakdown(db, member_id)
    return JSONResponse(content={
        "member_id": member_id,
        "current_congress": scorecard_store.current_congress,
        "lifetime": lifetime.to_dict(),
        "current": current.to_dict(),
    })


@router.get("/{member_id}/votes")
async def get_member_votes(
    member_id: str, db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Recorded choices for a member, newest vote first."""
    result = await db.execute(
        select(MemberVote, Vote)
        .join(Vote, MemberVote.vote_id == Vote.id)
        .where(MemberVote.member_id == member_id)
        .order_by(Vote.vote_date.is_(None), Vote.vote_date.desc(), MemberVote.recorded_at.desc())
    )
    rows = []
    for record, vote in result.all():
        rows.append({**record.to_dict(), "vote": vote.to_dict()})
    return JSONResponse(content=rows)


@router.post("/{member_id}/votes")
async def record_member_vote(
    member_id: str,
    body: ChoiceRecord,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    """Record or replace a member's choice on a vote and rescore the member."""
    record = await scorecard_store.upsert_choice(
        db, member_id, body.vote_id, body.choice, is_current=body.is_current
    )
    if record is None:
        return _not_found("Member or vote not found")
    return JSONResponse(content=record.to_dict())


@router.delete("/{member_id}/votes/{vote_id}")
async def delete_member_vote(
    member_id: str,
    vote_id: str,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    removed = await scorecard_store.delete_choice(db, member_id, vote_id)
    if not removed:
        return _not_found("Vote not found for this member")
    return JSONResponse(content={"success": True})
