"""Admin maintenance routes: roster sync and full rescoring."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.database import get_db
from scorecard.services.auth import require_admin
from scorecard.services.congress_api import CongressAPIError, congress_client
from scorecard.services.scorecard import scorecard_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/sync-members")
async def sync_members(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Import or update current members from Congress.gov, then rescore everyone."""
    try:
        result = await congress_client.sync_members(db)
    except CongressAPIError as exc:
        logger.error("Member sync failed: %s", exc)
        return JSONResponse(content={"error": "Sync failed", "detail": str(exc)}, status_code=502)
    await scorecard_store.recompute_all(db)
    return JSONResponse(content=result.to_dict())


@router.post("/recompute")
async def recompute_scores(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Rescore every member, e.g. after changing the scoring weights."""
    count = await scorecard_store.recompute_all(db)
    return JSONResponse(content={"success": True, "recomputed": count})
