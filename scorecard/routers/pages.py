"""Server-rendered public scorecard pages."""

import math
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.database import get_db
from scorecard.models import Member
from scorecard.routers.members import list_members
from scorecard.services.scorecard import scorecard_store
from scorecard.services.scoring import Category, Chamber

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

CATEGORY_LABELS = {
    Category.IMMIGRATION: "Immigration",
    Category.FOREIGN_AID: "Foreign Aid",
    Category.TAXES_TRADE: "Taxes & Trade",
    Category.HEALTHCARE: "Healthcare",
    Category.INSURANCE: "Insurance",
}


def format_score(score: Optional[float]) -> str:
    """Render a score as "92.5%", or a dash when there is no data."""
    if score is None or math.isnan(score):
        return "—"
    return f"{score:.1f}%"


templates.env.filters["score"] = format_score


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    q: Optional[str] = Query(default=None),
    chamber: Optional[Chamber] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Member list with lifetime and current scores."""
    members = await list_members(db, q=q, chamber=chamber)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "members": members,
            "q": q or "",
            "chamber": chamber.value if chamber else "",
            "chambers": [c.value for c in Chamber],
            "current_congress": scorecard_store.current_congress,
        },
    )


@router.get("/members/{member_id}", response_class=HTMLResponse)
async def member_page(
    request: Request, member_id: str, db: AsyncSession = Depends(get_db)
):
    """Per-category breakdown for one member."""
    member = await db.get(Member, member_id)
    if member is None:
        return templates.TemplateResponse(
            request, "not_found.html", {"member_id": member_id}, status_code=404
        )

    lifetime, current = await scorecard_store.score_breakdown(db, member_id)
    rows = [
        {
            "label": CATEGORY_LABELS[category],
            "lifetime": lifetime.per_category[category],
            "current": current.per_category[category],
        }
        for category in Category
    ]
    return templates.TemplateResponse(
        request,
        "member.html",
        {
            "member": member,
            "rows": rows,
            "lifetime": lifetime.overall,
            "current": current.overall,
            "current_congress": scorecard_store.current_congress,
        },
    )
