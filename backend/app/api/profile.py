"""Profile endpoints: onboarding, self view, and another student's profile."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.domain.profiles.schemas import ProfileDetail, ProfileOptions, ProfileOut, ProfileUpsertRequest
from app.domain.profiles.service import ProfileService, get_profile_service
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["profiles"])


@router.get("/profile/options", response_model=ProfileOptions)
async def profile_options() -> ProfileOptions:
	return ProfileService.options()


@router.get("/profile/me", response_model=ProfileOut)
async def get_me(
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ProfileService = Depends(get_profile_service),
) -> ProfileOut:
	return await service.get_my_profile(auth_user)


@router.put("/profile/me", response_model=ProfileOut)
async def put_me(
	payload: ProfileUpsertRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ProfileService = Depends(get_profile_service),
) -> ProfileOut:
	return await service.upsert_my_profile(auth_user, payload)


@router.get("/profiles/{profile_id}", response_model=ProfileDetail)
async def get_profile(
	profile_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ProfileService = Depends(get_profile_service),
) -> ProfileDetail:
	return await service.get_profile_detail(auth_user, profile_id)
