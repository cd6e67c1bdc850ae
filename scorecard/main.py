"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scorecard.config import get_settings
from scorecard.database import init_db
from scorecard.middleware import RateLimitMiddleware, RateLimitStore
from scorecard.routers import admin, auth, members, pages, votes
from scorecard.services.scoring import ScoringInputError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await init_db()
    logger.info("Scorecard started, current congress %d", settings.current_congress)
    yield


app = FastAPI(
    title="Scorecard",
    description="Track legislators' votes and score their alignment with a reference position",
    version="0.1.0",
    lifespan=lifespan,
)

rate_limit_store = RateLimitStore()
app.add_middleware(
    RateLimitMiddleware, store=rate_limit_store, trusted_proxies=settings.trusted_proxies
)

app.include_router(auth.router)
app.include_router(members.router)
app.include_router(votes.router)
app.include_router(admin.router)
app.include_router(pages.router)


@app.exception_handler(ScoringInputError)
async def scoring_input_error_handler(request: Request, exc: ScoringInputError):
    """Stored data the scoring engine refuses to score."""
    logger.error("Scoring input rejected on %s: %s", request.url.path, exc)
    return JSONResponse(content={"error": str(exc)}, status_code=422)


@app.get("/health")
async def health():
    return {"status": "ok"}
