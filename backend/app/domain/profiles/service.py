"""Profile reads and onboarding writes."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from app.domain.matching.scoring import calculate_match_score
from app.domain.profiles.exceptions import ProfileNotFound, ProfileRequired
from app.domain.profiles.repo import PostgresProfileRepository, ProfileRepository
from app.domain.profiles.schemas import (
	MatchOut,
	ProfileDetail,
	ProfileOptions,
	ProfileOut,
	ProfileUpsertRequest,
)
from app.domain.social.relationship import RelationshipResolver
from app.domain.social.repo import PostgresSocialRepository, SocialRepository
from app.infra.auth import AuthenticatedUser

logger = logging.getLogger(__name__)


class ProfileService:
	def __init__(
		self,
		repo: Optional[ProfileRepository] = None,
		social: Optional[SocialRepository] = None,
	) -> None:
		self._repo = repo or PostgresProfileRepository()
		self._social = social or PostgresSocialRepository()

	async def get_my_profile(self, auth_user: AuthenticatedUser) -> ProfileOut:
		profile = await self._repo.get_profile(str(auth_user.id))
		if profile is None:
			raise ProfileRequired()
		return ProfileOut.from_profile(profile)

	async def upsert_my_profile(self, auth_user: AuthenticatedUser, payload: ProfileUpsertRequest) -> ProfileOut:
		profile = payload.to_profile(str(auth_user.id), email=auth_user.email)
		stored = await self._repo.upsert_profile(profile)
		logger.info("profile saved", extra={"user_id": stored.id})
		return ProfileOut.from_profile(stored)

	async def get_profile_detail(self, auth_user: AuthenticatedUser, profile_id: UUID | str) -> ProfileDetail:
		"""Return another student's profile with the viewer's match and relationship."""
		viewer_id = str(auth_user.id)
		target = await self._repo.get_profile(str(profile_id))
		if target is None:
			raise ProfileNotFound()
		if target.id == viewer_id:
			return ProfileDetail(profile=ProfileOut.from_profile(target), is_self=True)

		match = None
		viewer = await self._repo.get_profile(viewer_id)
		if viewer is not None:
			result = calculate_match_score(viewer, target)
			match = MatchOut(score=result.score, reasons=list(result.reasons))

		resolver = await RelationshipResolver.load(self._social, viewer_id)
		return ProfileDetail(
			profile=ProfileOut.from_profile(target),
			match=match,
			relationship=resolver.state_for(target.id).value,
		)

	@staticmethod
	def options() -> ProfileOptions:
		return ProfileOptions()


_default_service: ProfileService | None = None


def get_profile_service() -> ProfileService:
	global _default_service
	if _default_service is None:
		_default_service = ProfileService()
	return _default_service
