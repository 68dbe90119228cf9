"""FastAPI endpoints for conversations and messages."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.domain.chat.schemas import (
	ConversationCreated,
	ConversationSummary,
	DirectConversationRequest,
	GroupConversationRequest,
	MarkReadResponse,
	MessageListResponse,
	MessageOut,
	SendMessageRequest,
)
from app.domain.chat.service import MESSAGE_PAGE_LIMIT, ChatService, get_chat_service
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/conversations", tags=["chat"])


@router.get("", response_model=List[ConversationSummary])
async def list_conversations(
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ChatService = Depends(get_chat_service),
) -> List[ConversationSummary]:
	return await service.list_conversations(auth_user)


@router.post("/direct", response_model=ConversationCreated)
async def open_direct(
	payload: DirectConversationRequest,
	response: Response,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ChatService = Depends(get_chat_service),
) -> ConversationCreated:
	result = await service.get_or_create_direct(auth_user, payload.user_id)
	response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
	return result


@router.post("/group", response_model=ConversationCreated, status_code=status.HTTP_201_CREATED)
async def create_group(
	payload: GroupConversationRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ChatService = Depends(get_chat_service),
) -> ConversationCreated:
	return await service.create_group(auth_user, payload.member_ids, payload.name)


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(
	conversation_id: UUID,
	limit: int = Query(default=MESSAGE_PAGE_LIMIT, ge=1, le=500),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
	return await service.list_messages(auth_user, conversation_id, limit=limit)


@router.post("/{conversation_id}/messages", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
	conversation_id: UUID,
	payload: SendMessageRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ChatService = Depends(get_chat_service),
) -> MessageOut:
	return await service.send_message(auth_user, conversation_id, payload.content)


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
	conversation_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	service: ChatService = Depends(get_chat_service),
) -> MarkReadResponse:
	return await service.mark_read(auth_user, conversation_id)
