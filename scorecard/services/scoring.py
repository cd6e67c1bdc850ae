"""Alignment scoring engine.

Pure functions mapping a vote catalog and recorded member choices to a 0-100
alignment score per policy category, plus an overall weighted score. No I/O,
no shared state: every call recomputes from the snapshots it is given.

Rubric (defaults):
- Member matches the reference position: 1.0 point
- Member voted the opposite way: 0.0 points
- Member absent, or no record at all: 0.25 points

Category scores are importance-weighted averages of those points. The overall
score is a weighted average over the categories that have data, renormalized
so missing categories count for nothing rather than zero.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Union


class Category(str, Enum):
    """Closed set of policy categories a reference vote can belong to."""

    IMMIGRATION = "IMMIGRATION"
    FOREIGN_AID = "FOREIGN_AID"
    TAXES_TRADE = "TAXES_TRADE"
    HEALTHCARE = "HEALTHCARE"
    INSURANCE = "INSURANCE"


class Chamber(str, Enum):
    SENATE = "Senate"
    HOUSE = "House"


class VoteChoice(str, Enum):
    """A recorded choice. YES is support, NO is oppose."""

    YES = "YES"
    NO = "NO"
    ABSENT = "ABSENT"


class ScoringInputError(ValueError):
    """Raised when votes or choices handed to the engine are malformed."""


DEFAULT_CATEGORY_WEIGHTS: Mapping[Category, float] = MappingProxyType({
    Category.IMMIGRATION: 0.30,
    Category.FOREIGN_AID: 0.30,
    Category.TAXES_TRADE: 0.20,
    Category.HEALTHCARE: 0.10,
    Category.INSURANCE: 0.10,
})

ALIGN_POINTS = 1.0
OPPOSE_POINTS = 0.0
ABSENCE_POINTS = 0.25


def _coerce(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ScoringInputError(f"Unknown {what}: {value!r}") from None


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring rubric: category weights and per-choice points.

    Attributes:
        category_weights: Weight per category. Must cover every category,
            be non-negative and sum to 1.0.
        absence_points: Partial credit for an absent member (0 to 1).
        align_points: Points for matching the reference position.
        oppose_points: Points for the opposite definite choice.
    """

    category_weights: Mapping[Category, float] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS)
    )
    absence_points: float = ABSENCE_POINTS
    align_points: float = ALIGN_POINTS
    oppose_points: float = OPPOSE_POINTS

    def __post_init__(self):
        weights = {
            _coerce(Category, key, "category"): float(value)
            for key, value in self.category_weights.items()
        }
        missing = set(Category) - set(weights)
        if missing:
            names = ", ".join(sorted(c.value for c in missing))
            raise ValueError(f"Category weights missing for: {names}")
        if any(w < 0 or not math.isfinite(w) for w in weights.values()):
            raise ValueError("Category weights must be finite and non-negative")
        if not math.isclose(sum(weights.values()), 1.0, abs_tol=1e-9):
            raise ValueError(
                f"Category weights must sum to 1.0, got {sum(weights.values())}"
            )
        for name in ("absence_points", "align_points", "oppose_points"):
            points = getattr(self, name)
            if not 0.0 <= points <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {points}")
        object.__setattr__(self, "category_weights", MappingProxyType(weights))

    def points_for(self, reference: VoteChoice, choice: VoteChoice) -> float:
        """Convert a (reference position, member choice) pair to points."""
        if choice is VoteChoice.ABSENT:
            return self.absence_points
        if choice is reference:
            return self.align_points
        return self.oppose_points


DEFAULT_SCORING_CONFIG = ScoringConfig()


@dataclass(frozen=True)
class ReferenceVote:
    """Read-only snapshot of a vote with the organization's position on it."""

    id: str
    congress: int
    chamber: Chamber
    category: Category
    reference_position: VoteChoice
    importance_weight: float = 1.0
    vote_date: Optional[date] = None

    def __post_init__(self):
        object.__setattr__(self, "chamber", _coerce(Chamber, self.chamber, "chamber"))
        object.__setattr__(
            self, "category", _coerce(Category, self.category, "category")
        )
        position = _coerce(VoteChoice, self.reference_position, "reference position")
        if position is VoteChoice.ABSENT:
            raise ScoringInputError(
                f"Vote {self.id}: reference position must be YES or NO"
            )
        object.__setattr__(self, "reference_position", position)

        try:
            weight = float(self.importance_weight)
        except (TypeError, ValueError):
            weight = math.nan
        if weight < 0 or not math.isfinite(weight):
            raise ScoringInputError(
                f"Vote {self.id}: importance weight must be a finite number >= 0, "
                f"got {self.importance_weight!r}"
            )
        object.__setattr__(self, "importance_weight", weight)


@dataclass(frozen=True)
class MemberChoice:
    """Read-only snapshot of one member's recorded choice on one vote."""

    vote_id: str
    member_id: str
    choice: VoteChoice
    is_current: Optional[bool] = None

    def __post_init__(self):
        object.__setattr__(self, "choice", _coerce(VoteChoice, self.choice, "choice"))


@dataclass(frozen=True)
class CategoryScoreResult:
    category: Category
    score: Optional[float]


@dataclass(frozen=True)
class MemberScoreResult:
    """Scores for one member. ``None`` means no data, never zero."""

    member_id: str
    per_category: Mapping[Category, Optional[float]] = field(default_factory=dict)
    overall: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "per_category", MappingProxyType(dict(self.per_category)))

    def categories(self) -> Iterator[CategoryScoreResult]:
        for category in Category:
            yield CategoryScoreResult(category, self.per_category.get(category))

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "per_category": {c.value: s for c, s in self.per_category.items()},
            "overall": self.overall,
        }


ChoiceIndex = dict[tuple[str, str], VoteChoice]


def index_choices(
    votes: Iterable[ReferenceVote], choices: Iterable[MemberChoice]
) -> ChoiceIndex:
    """Validate a snapshot and index choices by (member_id, vote_id).

    Raises:
        ScoringInputError: duplicate vote IDs, a choice pointing at a vote
            missing from the catalog, or two choices for the same pair.
    """
    vote_ids: set[str] = set()
    for vote in votes:
        if vote.id in vote_ids:
            raise ScoringInputError(f"Duplicate vote id: {vote.id}")
        vote_ids.add(vote.id)

    index: ChoiceIndex = {}
    for record in choices:
        if record.vote_id not in vote_ids:
            raise ScoringInputError(
                f"Choice for member {record.member_id} references unknown vote "
                f"{record.vote_id}"
            )
        key = (record.member_id, record.vote_id)
        if key in index:
            raise ScoringInputError(
                f"Duplicate choice for member {record.member_id} on vote {record.vote_id}"
            )
        index[key] = record.choice
    return index


def _score_category(
    member_id: str,
    category: Category,
    votes: list[ReferenceVote],
    index: ChoiceIndex,
    congress: Optional[int],
    config: ScoringConfig,
) -> Optional[float]:
    selected = [
        v for v in votes
        if v.category is category and (congress is None or v.congress == congress)
    ]
    if not selected:
        return None

    numerator = 0.0
    denominator = 0.0
    for vote in selected:
        # No record means the member was absent
        choice = index.get((member_id, vote.id), VoteChoice.ABSENT)
        points = config.points_for(vote.reference_position, choice)
        numerator += points * vote.importance_weight
        denominator += vote.importance_weight

    if denominator == 0:
        return None
    return numerator / denominator * 100


def compute_category_score(
    member_id: str,
    category: Union[Category, str],
    votes: Iterable[ReferenceVote],
    choices: Iterable[MemberChoice],
    congress: Optional[int] = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> Optional[float]:
    """Score one member in one category.

    Args:
        member_id: Member to score
        category: Category to score
        votes: Full vote catalog
        choices: Recorded choices (any members)
        congress: Only count votes from this session when given
        config: Scoring rubric

    Returns:
        Score in [0, 100], or None when no votes apply or all applicable
        votes have zero weight.
    """
    votes = list(votes)
    index = index_choices(votes, choices)
    return _score_category(
        member_id, _coerce(Category, category, "category"), votes, index, congress, config
    )


def compute_member_score(
    member_id: str,
    votes: Iterable[ReferenceVote],
    choices: Iterable[MemberChoice],
    congress: Optional[int] = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> MemberScoreResult:
    """Score one member in every category and combine into an overall score.

    The overall score only averages categories that returned a number; their
    weights are renormalized to sum to one. With no category data the overall
    score is None.
    """
    votes = list(votes)
    index = index_choices(votes, choices)

    per_category = {
        category: _score_category(member_id, category, votes, index, congress, config)
        for category in Category
    }

    weighted_sum = 0.0
    total_weight = 0.0
    for category, score in per_category.items():
        if score is None:
            continue
        weight = config.category_weights[category]
        weighted_sum += (score / 100) * weight
        total_weight += weight

    overall = None
    if total_weight > 0:
        overall = weighted_sum / total_weight * 100

    return MemberScoreResult(member_id=member_id, per_category=per_category, overall=overall)
