"""Domain models for student profiles."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

RecordLike = Mapping[str, Any]

BIO_MAX_LENGTH = 500


class AcademicYear(str, Enum):
	FRESHMAN = "Freshman"
	SOPHOMORE = "Sophomore"
	JUNIOR = "Junior"
	SENIOR = "Senior"
	GRAD = "Grad"
	OTHER = "Other"


class CampusArea(str, Enum):
	NORTH = "North Neighborhood"
	SOUTH = "South Neighborhood"
	EAST = "East Neighborhood"
	BRODY = "Brody Neighborhood"
	RIVER_TRAIL = "River Trail Neighborhood"
	OFF_CAMPUS = "Off Campus"


INTEREST_CATALOG: Tuple[str, ...] = (
	"Basketball", "Soccer", "Football", "Gaming", "Music", "Movies",
	"Reading", "Hiking", "Cooking", "Photography", "Art", "Dance",
	"Fitness", "Yoga", "Running", "Swimming", "Tennis", "Golf",
	"Coding", "Startups", "Finance", "Marketing", "Design", "Writing",
	"Travel", "Food", "Fashion", "Volunteering", "Politics", "Science",
)

LOOKING_FOR_CATALOG: Tuple[str, ...] = (
	"Friends", "Study Partners", "Gym Buddy", "Roommate", "Project Partners",
	"Sports Teams", "Club Members", "Mentors", "Networking", "Dating",
)


def normalize_tags(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
	"""Strip blanks and drop duplicates while keeping first-seen order."""
	if not values:
		return ()
	cleaned = (str(value).strip() for value in values if value is not None)
	return tuple(dict.fromkeys(tag for tag in cleaned if tag))


def _optional_text(value: Any) -> Optional[str]:
	if value is None:
		return None
	text = str(value).strip()
	return text or None


@dataclass(slots=True)
class Profile:
	"""A student's public attributes used for display and matching."""

	id: str
	full_name: str
	email: Optional[str] = None
	username: Optional[str] = None
	pronouns: Optional[str] = None
	major: Optional[str] = None
	year: Optional[str] = None
	bio: Optional[str] = None
	interests: Tuple[str, ...] = ()
	looking_for: Tuple[str, ...] = ()
	campus_area: Optional[str] = None
	avatar_url: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@property
	def first_name(self) -> str:
		parts = self.full_name.split(" ")
		return parts[0] if parts else self.full_name

	@classmethod
	def from_record(cls, record: RecordLike) -> "Profile":
		return cls(
			id=str(record["id"]),
			full_name=str(record.get("full_name") or ""),
			email=_optional_text(record.get("email")),
			username=_optional_text(record.get("username")),
			pronouns=_optional_text(record.get("pronouns")),
			major=_optional_text(record.get("major")),
			year=_optional_text(record.get("year")),
			bio=_optional_text(record.get("bio")),
			interests=normalize_tags(record.get("interests")),
			looking_for=normalize_tags(record.get("looking_for")),
			campus_area=_optional_text(record.get("campus_area")),
			avatar_url=_optional_text(record.get("avatar_url")),
			created_at=record.get("created_at"),
			updated_at=record.get("updated_at"),
		)
