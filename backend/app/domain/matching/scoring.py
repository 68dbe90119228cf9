"""Compatibility scoring between two student profiles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from app.domain.profiles.models import Profile

INTEREST_POINTS = 10
INTEREST_CAP = 50
MAJOR_POINTS = 15
YEAR_POINTS = 10
LOOKING_FOR_POINTS = 10
LOOKING_FOR_CAP = 20
AREA_POINTS = 5
MAX_SCORE = 100

# Interest reasons name at most this many tags before switching to the summary form.
_INTEREST_LIST_LIMIT = 3


@dataclass(frozen=True, slots=True)
class MatchResult:
	score: int
	reasons: Tuple[str, ...] = ()


def _shared(viewer_tags: Sequence[str], candidate_tags: Iterable[str]) -> List[str]:
	candidate_set = set(candidate_tags)
	return [tag for tag in dict.fromkeys(viewer_tags) if tag in candidate_set]


def _interest_reason(shared: List[str]) -> str:
	if len(shared) <= _INTEREST_LIST_LIMIT:
		return f"Shared interests: {', '.join(shared)}"
	return f"{len(shared)} shared interests including {shared[0]}, {shared[1]}"


def calculate_match_score(viewer: Profile, candidate: Profile) -> MatchResult:
	"""Score how well ``candidate`` fits ``viewer``.

	The sum of the weighted factors is symmetric in its arguments; only the
	reason wording (tag order, which major is quoted) follows the viewer.
	"""
	score = 0
	reasons: List[str] = []

	shared_interests = _shared(viewer.interests, candidate.interests)
	if shared_interests:
		score += min(len(shared_interests) * INTEREST_POINTS, INTEREST_CAP)
		reasons.append(_interest_reason(shared_interests))

	if viewer.major and candidate.major and viewer.major.lower() == candidate.major.lower():
		score += MAJOR_POINTS
		reasons.append(f"Same major: {candidate.major}")

	if viewer.year and viewer.year == candidate.year:
		score += YEAR_POINTS
		reasons.append(f"Same year: {viewer.year}")

	shared_goals = _shared(viewer.looking_for, candidate.looking_for)
	if shared_goals:
		score += min(len(shared_goals) * LOOKING_FOR_POINTS, LOOKING_FOR_CAP)
		reasons.append(f"Both looking for: {', '.join(shared_goals)}")

	if viewer.campus_area and viewer.campus_area == candidate.campus_area:
		score += AREA_POINTS
		reasons.append(f"Same area: {viewer.campus_area}")

	return MatchResult(score=min(score, MAX_SCORE), reasons=tuple(reasons))


__all__ = ["MatchResult", "calculate_match_score"]
