"""Congress.gov API client for syncing the member roster."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scorecard.config import get_settings
from scorecard.models import Member

logger = logging.getLogger(__name__)

settings = get_settings()

PAGE_SIZE = 250

STATE_ABBREV = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID",
    "Illinois": "IL", "Indiana": "IN", "Iowa": "IA", "Kansas": "KS",
    "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME", "Maryland": "MD",
    "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN", "Mississippi": "MS",
    "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK",
    "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT",
    "Vermont": "VT", "Virginia": "VA", "Washington": "WA", "West Virginia": "WV",
    "Wisconsin": "WI", "Wyoming": "WY", "District of Columbia": "DC",
}


class CongressAPIError(Exception):
    """Raised when Congress.gov cannot be reached or returns an error."""


@dataclass
class RosterMember:
    """Member record normalized from the Congress.gov format."""

    bioguide_id: str
    name: str
    state: str
    party: str
    chamber: str
    image_url: Optional[str] = None


@dataclass
class SyncResult:
    imported_count: int
    updated_count: int
    total_from_api: int
    usable_from_api: int

    def to_dict(self) -> dict:
        return {
            "success": True,
            "imported_count": self.imported_count,
            "updated_count": self.updated_count,
            "total_from_api": self.total_from_api,
            "usable_from_api": self.usable_from_api,
        }


def display_name(name: str) -> str:
    """Convert "Last, First" to "First Last"."""
    if "," not in name:
        return name.strip()
    last, _, first = name.partition(",")
    return f"{first.strip()} {last.strip()}".strip()


def party_code(party_name: Optional[str]) -> Optional[str]:
    party_name = (party_name or "").lower()
    if "republican" in party_name:
        return "R"
    if "democrat" in party_name:
        return "D"
    if "independent" in party_name:
        return "I"
    return None


def latest_chamber(terms) -> Optional[str]:
    """Chamber of the most recent term. Terms come as a list or {"item": [...]}."""
    if isinstance(terms, dict):
        terms = terms.get("item", [])
    if not isinstance(terms, list) or not terms:
        return None

    chamber = terms[-1].get("chamber") or ""
    if "House" in chamber:
        return "House"
    if "Senate" in chamber:
        return "Senate"
    return None


def normalize_member(raw: dict) -> Optional[RosterMember]:
    """Normalize one Congress.gov member record.

    Returns:
        RosterMember, or None if any required field is missing
    """
    data = raw.get("member", raw)

    bioguide_id = data.get("bioguideId")
    name = display_name(data.get("name") or "")
    state = STATE_ABBREV.get(data.get("state") or "")
    party = party_code(data.get("partyName"))
    chamber = latest_chamber(data.get("terms"))

    if not all([bioguide_id, name, state, party, chamber]):
        return None

    depiction = data.get("depiction") or {}
    return RosterMember(
        bioguide_id=bioguide_id,
        name=name,
        state=state,
        party=party,
        chamber=chamber,
        image_url=depiction.get("imageUrl"),
    )


def normalize_members(raw_members: list[dict]) -> list[RosterMember]:
    members = []
    for raw in raw_members:
        member = normalize_member(raw)
        if member is not None:
            members.append(member)
    return members


class CongressAPIClient:
    """Client for the Congress.gov member endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.congress_api_base_url
        self.api_key = api_key if api_key is not None else settings.congress_api_key
        self._transport = transport

    def _get_headers(self) -> dict:
        return {"X-Api-Key": self.api_key}

    async def fetch_current_members(self) -> list[dict]:
        """Fetch every current member, following pagination.

        Raises:
            CongressAPIError: missing API key, HTTP error or timeout
        """
        if not self.api_key:
            raise CongressAPIError("CONGRESS_API_KEY is not set")

        members: list[dict] = []
        offset = 0
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                while True:
                    response = await client.get(
                        f"{self.base_url}/member",
                        headers=self._get_headers(),
                        params={
                            "format": "json",
                            "currentMember": "true",
                            "limit": PAGE_SIZE,
                            "offset": offset,
                        },
                        timeout=30.0,
                    )
                    response.raise_for_status()
                    data = response.json()

                    members.extend(data.get("members", []))

                    pagination = data.get("pagination") or {}
                    if not pagination.get("next"):
                        break
                    offset += PAGE_SIZE
                    count = pagination.get("count")
                    if count is not None and offset >= count:
                        break
        except httpx.HTTPStatusError as exc:
            raise CongressAPIError(
                f"Congress.gov member request failed: {exc.response.status_code} "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CongressAPIError(f"Congress.gov member request failed: {exc}") from exc

        return members

    async def sync_members(self, db: AsyncSession) -> SyncResult:
        """Upsert the current roster into the members table by bioguide ID.

        Existing members keep their image and display position. New members
        are appended after the last position.
        """
        raw_members = await self.fetch_current_members()
        roster = normalize_members(raw_members)
        logger.info(
            "Congress sync: fetched %d raw, %d usable members",
            len(raw_members), len(roster),
        )

        result = await db.execute(select(func.coalesce(func.max(Member.position), 0)))
        next_position = result.scalar_one() or 0

        imported = 0
        updated = 0
        try:
            for entry in roster:
                result = await db.execute(
                    select(Member).where(Member.bioguide_id == entry.bioguide_id)
                )
                existing = result.scalar_one_or_none()

                if existing:
                    existing.name = entry.name
                    existing.chamber = entry.chamber
                    existing.state = entry.state
                    existing.party = entry.party
                    updated += 1
                else:
                    next_position += 1
                    db.add(Member(
                        bioguide_id=entry.bioguide_id,
                        name=entry.name,
                        chamber=entry.chamber,
                        state=entry.state,
                        party=entry.party,
                        image_url=entry.image_url,
                        position=next_position,
                    ))
                    imported += 1
                # Flush so a bioguide ID repeated in the feed matches the new row
                await db.flush()
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Congress sync: %d imported, %d updated", imported, updated)
        return SyncResult(
            imported_count=imported,
            updated_count=updated,
            total_from_api=len(raw_members),
            usable_from_api=len(roster),
        )


congress_client = CongressAPIClient()
