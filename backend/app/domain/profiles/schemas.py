"""Pydantic schemas for profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.domain.profiles.models import (
	BIO_MAX_LENGTH,
	INTEREST_CATALOG,
	LOOKING_FOR_CATALOG,
	AcademicYear,
	CampusArea,
	Profile,
	normalize_tags,
)

Tag = Annotated[str, Field(min_length=1, max_length=40)]


class ProfileUpsertRequest(BaseModel):
	full_name: Annotated[str, Field(min_length=1, max_length=100)]
	username: Optional[Annotated[str, Field(max_length=40)]] = None
	pronouns: Optional[Annotated[str, Field(max_length=40)]] = None
	major: Optional[Annotated[str, Field(max_length=100)]] = None
	year: Optional[AcademicYear] = None
	bio: Optional[Annotated[str, Field(max_length=BIO_MAX_LENGTH)]] = None
	interests: List[Tag] = Field(default_factory=list, max_length=30)
	looking_for: List[Tag] = Field(default_factory=list, max_length=10)
	campus_area: Optional[CampusArea] = None
	avatar_url: Optional[Annotated[str, Field(max_length=2048)]] = None

	@field_validator("full_name", mode="before")
	@classmethod
	def _strip_name(cls, value):
		return value.strip() if isinstance(value, str) else value

	@field_validator("username", "pronouns", "major", "bio", "avatar_url", mode="before")
	@classmethod
	def _blank_to_none(cls, value):
		if isinstance(value, str):
			value = value.strip()
			return value or None
		return value

	def to_profile(self, user_id: str, *, email: Optional[str] = None) -> Profile:
		return Profile(
			id=user_id,
			full_name=self.full_name,
			email=email,
			username=self.username,
			pronouns=self.pronouns,
			major=self.major,
			year=self.year.value if self.year else None,
			bio=self.bio,
			interests=normalize_tags(self.interests),
			looking_for=normalize_tags(self.looking_for),
			campus_area=self.campus_area.value if self.campus_area else None,
			avatar_url=self.avatar_url,
		)


class ProfileOut(BaseModel):
	id: UUID
	full_name: str
	username: Optional[str] = None
	pronouns: Optional[str] = None
	major: Optional[str] = None
	year: Optional[str] = None
	bio: Optional[str] = None
	interests: List[str] = Field(default_factory=list)
	looking_for: List[str] = Field(default_factory=list)
	campus_area: Optional[str] = None
	avatar_url: Optional[str] = None
	updated_at: Optional[datetime] = None

	@classmethod
	def from_profile(cls, profile: Profile) -> "ProfileOut":
		return cls(
			id=profile.id,
			full_name=profile.full_name,
			username=profile.username,
			pronouns=profile.pronouns,
			major=profile.major,
			year=profile.year,
			bio=profile.bio,
			interests=list(profile.interests),
			looking_for=list(profile.looking_for),
			campus_area=profile.campus_area,
			avatar_url=profile.avatar_url,
			updated_at=profile.updated_at,
		)


class MatchOut(BaseModel):
	score: int = Field(..., ge=0, le=100)
	reasons: List[str] = Field(default_factory=list)


class ProfileDetail(BaseModel):
	profile: ProfileOut
	is_self: bool = False
	match: Optional[MatchOut] = None
	relationship: str = "none"


class ProfileOptions(BaseModel):
	years: List[str] = Field(default_factory=lambda: [year.value for year in AcademicYear])
	campus_areas: List[str] = Field(default_factory=lambda: [area.value for area in CampusArea])
	interests: List[str] = Field(default_factory=lambda: list(INTEREST_CATALOG))
	looking_for: List[str] = Field(default_factory=lambda: list(LOOKING_FOR_CATALOG))
	bio_max_length: int = BIO_MAX_LENGTH
