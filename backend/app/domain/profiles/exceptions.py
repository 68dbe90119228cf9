"""Domain-level exceptions for profiles."""

from __future__ import annotations


class ProfileError(Exception):
    """Base class for profile errors."""

    reason: str = "unknown"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class ProfileNotFound(ProfileError):
    reason = "profile_not_found"


class ProfileRequired(ProfileNotFound):
    """The acting user has not finished onboarding."""

    reason = "profile_required"
