"""Routes for reference votes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.database import get_db
from scorecard.models import Vote
from scorecard.schemas import VoteCreate, VoteUpdate
from scorecard.services.auth import require_admin
from scorecard.services.scorecard import scorecard_store
from scorecard.services.scoring import Category, Chamber

router = APIRouter(prefix="/api/votes", tags=["votes"])

REQUIRED_FIELDS = {
    "title", "congress", "chamber", "category", "reference_position", "importance_weight",
}


@router.get("")
async def list_votes(
    chamber: Optional[Chamber] = Query(default=None, description="House or Senate"),
    category: Optional[Category] = Query(default=None, description="Policy category"),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """List votes, newest first."""
    stmt = select(Vote).order_by(Vote.vote_date.is_(None), Vote.vote_date.desc(), Vote.title)
    if chamber:
        stmt = stmt.where(Vote.chamber == chamber.value)
    if category:
        stmt = stmt.where(Vote.category == category.value)

    result = await db.execute(stmt)
    return JSONResponse(content=[v.to_dict() for v in result.scalars().all()])


@router.post("", status_code=201)
async def create_vote(
    body: VoteCreate,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    """Add a vote and rescore every member, since none has a record on it yet."""
    vote = Vote(**body.model_dump(mode="json", exclude={"vote_date"}), vote_date=body.vote_date)
    db.add(vote)
    await db.flush()
    await scorecard_store.on_vote_changed(db, vote.id)
    await db.refresh(vote)
    return JSONResponse(content=vote.to_dict(), status_code=201)


@router.get("/{vote_id}")
async def get_vote(vote_id: str, db: AsyncSession = Depends(get_db)) -> JSONResponse:
    vote = await db.get(Vote, vote_id)
    if vote is None:
        return JSONResponse(content={"error": "Vote not found"}, status_code=404)
    return JSONResponse(content=vote.to_dict())


@router.put("/{vote_id}")
async def update_vote(
    vote_id: str,
    body: VoteUpdate,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    """Edit a vote and rescore every member who has a choice recorded on it."""
    updates = body.model_dump(mode="json", exclude_unset=True, exclude={"vote_date"})
    if "vote_date" in body.model_fields_set:
        updates["vote_date"] = body.vote_date
    if not updates:
        return JSONResponse(content={"error": "No valid fields to update"}, status_code=400)
    null_fields = sorted(k for k in REQUIRED_FIELDS & updates.keys() if updates[k] is None)
    if null_fields:
        return JSONResponse(
            content={"error": f"Fields cannot be null: {', '.join(null_fields)}"},
            status_code=400,
        )

    vote = await db.get(Vote, vote_id)
    if vote is None:
        return JSONResponse(content={"error": "Vote not found"}, status_code=404)

    for key, value in updates.items():
        setattr(vote, key, value)
    await db.flush()
    await scorecard_store.on_vote_changed(db, vote_id)
    await db.refresh(vote)
    return JSONResponse(content=vote.to_dict())


@router.delete("/{vote_id}")
async def delete_vote(
    vote_id: str,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(require_admin),
) -> JSONResponse:
    """Delete a vote and its recorded choices, rescoring affected members."""
    vote = await db.get(Vote, vote_id)
    if vote is None:
        return JSONResponse(content={"error": "Vote not found"}, status_code=404)

    payload = vote.to_dict()
    await scorecard_store.delete_vote(db, vote_id)
    return JSONResponse(content=payload)
