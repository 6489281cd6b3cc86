from __future__ import annotations

from fastapi import APIRouter

from care_messaging.api.deps import CurrentPrincipal, PartnerId, UoWDep
from care_messaging.api.v1.schemas.conversation import (
    ConversationSummaryResponse,
    MarkReadResponse,
    UnreadCountResponse,
)
from care_messaging.api.v1.schemas.message import MessageResponse
from care_messaging.services import conversation_service, message_service, read_state_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationSummaryResponse]:
    summaries = await conversation_service.get_inbox(principal.subject_id, uow)
    return [
        ConversationSummaryResponse.model_validate(s, from_attributes=True) for s in summaries
    ]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UnreadCountResponse:
    count = await conversation_service.get_unread_count(principal.subject_id, uow)
    return UnreadCountResponse(unread_count=count)


@router.get("/{partner_id}/messages", response_model=list[MessageResponse])
async def get_transcript(
    partner_id: PartnerId,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.get_transcript(principal.subject_id, partner_id, uow)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.post("/{partner_id}/read", response_model=MarkReadResponse)
async def mark_read(
    partner_id: PartnerId,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    """Mark everything ``partner_id`` sent to the caller as read."""
    updated = await read_state_service.mark_read(partner_id, principal.subject_id, uow)
    return MarkReadResponse(updated=updated)
