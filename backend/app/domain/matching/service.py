"""Discover feed: score every candidate against the viewer and rank them."""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

from app.domain.matching.schemas import DiscoverCard, DiscoverResponse
from app.domain.matching.scoring import calculate_match_score
from app.domain.profiles.exceptions import ProfileRequired
from app.domain.profiles.repo import PostgresProfileRepository, ProfileRepository
from app.domain.profiles.schemas import ProfileOut
from app.domain.social.relationship import RelationshipResolver
from app.domain.social.repo import PostgresSocialRepository, SocialRepository
from app.infra.auth import AuthenticatedUser
from app.obs import metrics as obs_metrics
from app.settings import settings


class DiscoveryService:
	def __init__(
		self,
		profiles: Optional[ProfileRepository] = None,
		social: Optional[SocialRepository] = None,
		*,
		candidate_limit: Optional[int] = None,
	) -> None:
		self._profiles = profiles or PostgresProfileRepository()
		self._social = social or PostgresSocialRepository()
		self._candidate_limit = candidate_limit

	async def list_discover(
		self,
		auth_user: AuthenticatedUser,
		*,
		year: Optional[str] = None,
		interests: Sequence[str] = (),
		limit: int = 50,
	) -> DiscoverResponse:
		started = time.perf_counter()
		viewer_id = str(auth_user.id)
		viewer = await self._profiles.get_profile(viewer_id)
		if viewer is None:
			raise ProfileRequired()

		candidate_limit = self._candidate_limit or settings.discover_candidate_limit
		candidates = await self._profiles.list_candidates(viewer_id, limit=candidate_limit)
		resolver = await RelationshipResolver.load(self._social, viewer_id)

		cards: List[DiscoverCard] = []
		for candidate in candidates:
			if candidate.id == viewer_id or resolver.is_friend(candidate.id):
				continue
			result = calculate_match_score(viewer, candidate)
			cards.append(
				DiscoverCard(
					profile=ProfileOut.from_profile(candidate),
					score=result.score,
					reasons=list(result.reasons),
					relationship=resolver.state_for(candidate.id),
				)
			)
		scored = len(cards)
		# sorted() is stable, so equal scores keep recency order.
		cards = sorted(cards, key=lambda card: card.score, reverse=True)

		wanted = {tag for tag in interests if tag}
		if year:
			cards = [card for card in cards if card.profile.year == year]
		if wanted:
			cards = [card for card in cards if wanted.intersection(card.profile.interests)]

		obs_metrics.observe_discover(time.perf_counter() - started, scored)
		return DiscoverResponse(
			items=cards[:limit],
			total=len(cards),
			year=year,
			interests=sorted(wanted),
		)


_default_service: DiscoveryService | None = None


def get_discovery_service() -> DiscoveryService:
	global _default_service
	if _default_service is None:
		_default_service = DiscoveryService()
	return _default_service
