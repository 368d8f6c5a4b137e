"""
Personalized attraction recommendations.

Every attraction starts at 50 points and collects up to

* 40 for overlap with the traveler's stated interests,
* 20 for fit with the travel type,
* 10 for fit with the age group,
* 10 for the budget level (a flat 5 for "moderate"),

then the total is truncated to an integer and capped at 100.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Sequence

from .catalog import AttractionCatalog
from .lifecycle import DEFAULT_TTL_SECONDS
from .models import Attraction, UserProfile
from .store import TTLStore

logger = logging.getLogger(__name__)

USER_PROFILE_KEY_PREFIX = "user_profile:"

BASE_SCORE = 50
PREFERENCE_WEIGHT = 40
TRAVEL_TYPE_WEIGHT = 20
AGE_GROUP_WEIGHT = 10
BUDGET_MATCH_BONUS = 10
MODERATE_BUDGET_BONUS = 5
MAX_SCORE = 100


class TravelType(str, Enum):
    GENERAL = "general"
    SOLO = "solo"
    FAMILY = "family"
    ROMANTIC = "romantic"
    BUSINESS = "business"
    ADVENTURE = "adventure"
    CULTURAL = "cultural"
    BUDGET = "budget"
    LUXURY = "luxury"


class AgeGroup(str, Enum):
    ADULT = "adult"
    CHILD = "child"
    TEEN = "teen"
    FAMILY = "family"
    SENIOR = "senior"


# GENERAL and ADULT are deliberately absent: they add nothing
TRAVEL_TYPE_TAGS: Dict[TravelType, FrozenSet[str]] = {
    TravelType.SOLO: frozenset({"budget", "culture", "photography", "adventure"}),
    TravelType.FAMILY: frozenset({"family-friendly", "budget", "outdoor"}),
    TravelType.ROMANTIC: frozenset({"romantic", "luxury", "photography"}),
    TravelType.BUSINESS: frozenset({"culture", "architecture"}),
    TravelType.ADVENTURE: frozenset({"adventure", "outdoor", "sports", "nature"}),
    TravelType.CULTURAL: frozenset({"culture", "history", "art", "architecture", "music"}),
    TravelType.BUDGET: frozenset({"budget"}),
    TravelType.LUXURY: frozenset({"luxury", "romantic"}),
}

AGE_GROUP_TAGS: Dict[AgeGroup, FrozenSet[str]] = {
    AgeGroup.CHILD: frozenset({"family-friendly", "adventure", "outdoor"}),
    AgeGroup.TEEN: frozenset({"adventure", "sports", "outdoor", "photography"}),
    AgeGroup.FAMILY: frozenset({"family-friendly", "budget"}),
    AgeGroup.SENIOR: frozenset({"culture", "history", "art", "architecture"}),
}


class ScoreResult(NamedTuple):
    score: int
    matched_tags: List[str]


def _unique(values: Sequence[str]) -> List[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def humanize_tag(tag: str) -> str:
    """``"family-friendly"`` -> ``"Family friendly"``."""
    text = tag.replace("-", " ")
    return text[:1].upper() + text[1:]


def _affinity(tags: Sequence[str], expected: FrozenSet[str], weight: int) -> float:
    if not expected:
        return 0.0
    overlap = sum(1 for tag in tags if tag in expected)
    return (overlap / len(expected)) * weight


def _travel_type_tags(value: str) -> FrozenSet[str]:
    try:
        return TRAVEL_TYPE_TAGS.get(TravelType(value), frozenset())
    except ValueError:
        return frozenset()


def _age_group_tags(value: str) -> FrozenSet[str]:
    try:
        return AGE_GROUP_TAGS.get(AgeGroup(value), frozenset())
    except ValueError:
        return frozenset()


def score_attraction(attraction: Attraction, profile: UserProfile) -> ScoreResult:
    """Pure scoring of one attraction against one traveler profile."""
    tags = attraction.tags
    preferences = _unique(profile.preferences)

    score = float(BASE_SCORE)
    matched: List[str] = []
    if preferences:
        # Divides by every stated preference, even ones no attraction carries
        score += _affinity(tags, frozenset(preferences), PREFERENCE_WEIGHT)
        matched = [humanize_tag(tag) for tag in tags if tag in preferences]

    score += _affinity(tags, _travel_type_tags(profile.travel_type), TRAVEL_TYPE_WEIGHT)
    score += _affinity(tags, _age_group_tags(profile.age_group), AGE_GROUP_WEIGHT)

    if profile.budget == "budget" and "budget" in tags:
        score += BUDGET_MATCH_BONUS
    elif profile.budget == "luxury" and "luxury" in tags:
        score += BUDGET_MATCH_BONUS
    elif profile.budget == "moderate":
        score += MODERATE_BUDGET_BONUS

    return ScoreResult(score=min(MAX_SCORE, int(score)), matched_tags=matched)


class RecommendationService:
    """Ranks a destination's attractions for a traveler and remembers the profile."""

    def __init__(
        self,
        store: TTLStore,
        catalog: AttractionCatalog,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self.store = store
        self.catalog = catalog
        self.ttl_seconds = ttl_seconds

    def save_profile(self, profile: UserProfile) -> None:
        # Last write wins, no merging with an earlier profile
        self.store.put(USER_PROFILE_KEY_PREFIX + profile.user_id, profile.model_dump(mode="json"), self.ttl_seconds)
        logger.info(f"User profile saved for {profile.user_id}")

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        raw = self.store.get(USER_PROFILE_KEY_PREFIX + user_id)
        if raw is None:
            return None
        return UserProfile.model_validate(raw)

    def recommend(self, destination_id: int, profile: UserProfile, limit: int = 6) -> List[dict]:
        """
        Score every attraction of a destination and return the best ``limit``.

        Each entry holds ``attraction``, ``match_score`` and ``matched_tags``.
        Ties keep catalog order.
        """
        self.save_profile(profile)

        scored = []
        for attraction in self.catalog.list_by_destination(destination_id):
            result = score_attraction(attraction, profile)
            scored.append({
                "attraction": attraction,
                "match_score": result.score,
                "matched_tags": result.matched_tags,
            })
        scored.sort(key=lambda item: item["match_score"], reverse=True)
        return scored[:limit]
