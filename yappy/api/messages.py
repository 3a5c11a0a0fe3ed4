"""Message API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from yappy.api.dependencies import get_message_service
from yappy.config import get_settings
from yappy.models import Message
from yappy.schemas.common import SuccessResponse, UserActionRequest
from yappy.schemas.message import (
    MarkSeenResponse,
    MessageCreate,
    MessageDeleteRequest,
    MessagePage,
    MessageResponse,
    ReactionResponse,
    ReactionToggle,
    ReactionToggleResponse,
)
from yappy.services.message_service import MessageService
from yappy.tasks.push import send_message_push

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])

settings = get_settings()


def to_message_response(message: Message, deleted_ids: set[int] | None = None) -> MessageResponse:
    """Serialize a message; deleted_ids is only passed for admin viewers."""
    response = MessageResponse.model_validate(message)
    if deleted_ids is not None:
        response.is_deleted = message.id in deleted_ids
    return response


@router.get("", response_model=MessagePage)
def list_messages(
    service: Annotated[MessageService, Depends(get_message_service)],
    limit: int | None = Query(default=None, ge=1, le=settings.message_page_size_max),
    before: int | None = Query(default=None, description="Return messages older than this id"),
    user_id: int | None = Query(default=None, description="Viewing user"),
):
    """Get a page of messages, oldest first."""
    page = service.list_messages(requester_id=user_id, before_message_id=before, limit=limit)
    return MessagePage(
        messages=[to_message_response(m, page.deleted_ids) for m in page.messages],
        has_more=page.has_more,
    )


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_message(
    message_data: MessageCreate,
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Create a message or note, optionally as a reply."""
    message = service.create_message(
        sender_user_id=message_data.sender_user_id,
        text=message_data.text,
        image_base64=message_data.image_base64,
        audio_base64=message_data.audio_base64,
        reply_to_message_id=message_data.reply_to_message_id,
    )

    if service.settings.push_configured:
        send_message_push.delay(message.id)

    return to_message_response(message)


@router.delete("", response_model=SuccessResponse)
def clear_messages(
    data: UserActionRequest,
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Clear the chat: the admin deletes everything, others hide everything for themselves."""
    service.clear_all(data.user_id)
    return SuccessResponse()


@router.post("/seen", response_model=MarkSeenResponse)
def mark_seen(
    data: UserActionRequest,
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Mark every message from other users as seen."""
    marked = service.mark_seen_for_user(data.user_id)
    return MarkSeenResponse(marked_count=marked)


@router.delete("/{message_id}", response_model=SuccessResponse)
def delete_message(
    message_id: int,
    data: MessageDeleteRequest,
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Hide a message for the requester, or for everyone when the admin asks."""
    if data.for_everyone:
        service.hide_for_everyone(message_id, data.user_id)
    else:
        service.soft_delete_for_user(message_id, data.user_id)
    return SuccessResponse()


@router.post("/{message_id}/reactions", response_model=ReactionToggleResponse)
def toggle_reaction(
    message_id: int,
    data: ReactionToggle,
    service: Annotated[MessageService, Depends(get_message_service)],
):
    """Add a reaction, or remove it if the user already reacted with that emoji."""
    reactions = service.toggle_reaction(message_id, data.user_id, data.emoji)
    return ReactionToggleResponse(
        reactions=[ReactionResponse.model_validate(r) for r in reactions]
    )
