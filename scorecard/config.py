"""Application configuration loaded from environment variables."""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from scorecard.services.scoring import (
    ABSENCE_POINTS,
    DEFAULT_CATEGORY_WEIGHTS,
    ScoringConfig,
)

load_dotenv()


def parse_category_weights(raw: Optional[str]) -> dict[str, float]:
    """Parse ``IMMIGRATION=0.3,FOREIGN_AID=0.3,...`` into a weight mapping.

    Categories left out keep their default weight.
    """
    weights = {category.value: weight for category, weight in DEFAULT_CATEGORY_WEIGHTS.items()}
    if not raw:
        return weights

    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid category weight entry: {item!r}")
        weights[name.strip().upper()] = float(value)
    return weights


class Settings:
    """Application settings loaded from environment."""

    def __init__(self):
        self.database_url: str = os.getenv(
            "DATABASE_URL", "sqlite+aiosqlite:///./scorecard.db"
        )
        self.admin_password: str = os.getenv("ADMIN_PASSWORD", "change-me")
        self.congress_api_key: str = os.getenv("CONGRESS_API_KEY", "")
        self.current_congress: int = int(os.getenv("CURRENT_CONGRESS", "119"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        # Proxy addresses whose X-Forwarded-For header is trusted for rate limiting
        self.trusted_proxies: frozenset[str] = frozenset(
            host.strip()
            for host in os.getenv("TRUSTED_PROXIES", "").split(",")
            if host.strip()
        )

        self.score_absence_points: float = float(
            os.getenv("SCORE_ABSENCE_POINTS", str(ABSENCE_POINTS))
        )
        self.score_category_weights: dict[str, float] = parse_category_weights(
            os.getenv("SCORE_CATEGORY_WEIGHTS")
        )

    @property
    def congress_api_base_url(self) -> str:
        return "https://api.congress.gov/v3"

    @property
    def scoring_config(self) -> ScoringConfig:
        return ScoringConfig(
            category_weights=self.score_category_weights,
            absence_points=self.score_absence_points,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
