"""Match scoring and discovery."""

from .scoring import MatchResult, calculate_match_score

__all__ = ["MatchResult", "calculate_match_score"]
