"""REST API surface for friend requests and friendships."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.errors import to_http
from app.domain.profiles.exceptions import ProfileError
from app.domain.profiles.schemas import ProfileOut
from app.domain.social.exceptions import FriendRequestRateLimitExceeded, SocialError
from app.domain.social.schemas import FriendRequestSummary, RelationshipOut, RequestOutcome, SendRequestPayload
from app.domain.social.service import SocialService, get_social_service
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["social"])


@router.post("/friend-requests", response_model=RequestOutcome)
async def send_request(
	payload: SendRequestPayload,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> RequestOutcome:
	try:
		return await service.send_request(auth_user, payload.to_user_id, payload.note)
	except (SocialError, ProfileError, FriendRequestRateLimitExceeded) as exc:
		raise to_http(exc) from None


@router.post("/friend-requests/{request_id}/accept", response_model=RequestOutcome)
async def accept_request(
	request_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> RequestOutcome:
	try:
		return await service.accept_request(auth_user, request_id)
	except SocialError as exc:
		raise to_http(exc) from None


@router.post("/friend-requests/{request_id}/decline", response_model=RequestOutcome)
async def decline_request(
	request_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> RequestOutcome:
	try:
		return await service.decline_request(auth_user, request_id)
	except SocialError as exc:
		raise to_http(exc) from None


@router.post("/friend-requests/{request_id}/cancel", response_model=RequestOutcome)
async def cancel_request(
	request_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> RequestOutcome:
	try:
		return await service.cancel_request(auth_user, request_id)
	except SocialError as exc:
		raise to_http(exc) from None


@router.get("/friend-requests/incoming", response_model=List[FriendRequestSummary])
async def incoming(
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> List[FriendRequestSummary]:
	return await service.list_incoming(auth_user)


@router.get("/friend-requests/outgoing", response_model=List[FriendRequestSummary])
async def outgoing(
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> List[FriendRequestSummary]:
	return await service.list_outgoing(auth_user)


@router.get("/friends", response_model=List[ProfileOut])
async def friends(
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> List[ProfileOut]:
	return await service.list_friends(auth_user)


@router.get("/relationships/{user_id}", response_model=RelationshipOut)
async def relationship(
	user_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: SocialService = Depends(get_social_service),
) -> RelationshipOut:
	return await service.get_relationship(auth_user, user_id)
