"""Discover feed endpoint."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.domain.matching.schemas import DiscoverResponse
from app.domain.matching.service import DiscoveryService, get_discovery_service
from app.domain.profiles.models import AcademicYear
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/discover", tags=["discovery"])


@router.get("", response_model=DiscoverResponse)
async def discover(
	*,
	year: Optional[AcademicYear] = Query(default=None),
	interests: Optional[List[str]] = Query(default=None),
	limit: int = Query(default=50, ge=1, le=200),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: DiscoveryService = Depends(get_discovery_service),
) -> DiscoverResponse:
	return await service.list_discover(
		auth_user,
		year=year.value if year else None,
		interests=interests or (),
		limit=limit,
	)
