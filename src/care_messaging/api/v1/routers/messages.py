from __future__ import annotations

from fastapi import APIRouter

from care_messaging.api.deps import OnboardedPrincipal, UoWDep
from care_messaging.api.v1.schemas.message import MessageResponse, SendMessageRequest
from care_messaging.services import message_service

router = APIRouter(prefix="/api/v1/chat/messages", tags=["messages"])


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    body: SendMessageRequest,
    principal: OnboardedPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        principal.subject_id,
        body.receiver_id,
        body.content,
        uow,
        sender_role=principal.role,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)
