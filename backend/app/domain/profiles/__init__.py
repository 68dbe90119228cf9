"""Profile domain exports."""

from .models import AcademicYear, CampusArea, Profile  # noqa: F401
