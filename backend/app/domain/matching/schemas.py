"""Schemas for the discover feed."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.profiles.schemas import ProfileOut
from app.domain.social.models import RelationshipState


class DiscoverCard(BaseModel):
	profile: ProfileOut
	score: int = Field(..., ge=0, le=100)
	reasons: List[str] = Field(default_factory=list)
	relationship: RelationshipState = RelationshipState.NONE


class DiscoverResponse(BaseModel):
	items: List[DiscoverCard] = Field(default_factory=list)
	total: int = 0
	year: Optional[str] = None
	interests: List[str] = Field(default_factory=list)
