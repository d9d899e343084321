"""Conversation CRUD and the send-message endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from chatbridge.api.deps import CurrentUser, Orchestrator
from chatbridge.api.schemas import (
    ConversationCreate,
    ConversationDetail,
    ConversationOut,
    ConversationUpdate,
    MessageOut,
    SendMessageRequest,
    SendMessageResponse,
)
from chatbridge.core.exceptions import NotFoundError
from chatbridge.storage import conversations
from chatbridge.storage.models import Conversation

router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


@router.post("", response_model=ConversationOut, status_code=201)
def create_conversation(payload: ConversationCreate, user: CurrentUser) -> Conversation:
    return conversations.create_conversation(
        int(user.id), payload.title, payload.provider, payload.model
    )


@router.get("", response_model=list[ConversationOut])
def list_conversations(user: CurrentUser) -> list[Conversation]:
    return conversations.list_conversations(int(user.id))


@router.get("/{conversation_id}", response_model=ConversationDetail)
def get_conversation(conversation_id: int, user: CurrentUser) -> ConversationDetail:
    conversation = conversations.get_conversation(int(user.id), conversation_id)
    if conversation is None:
        raise NotFoundError("conversation")
    messages = conversations.list_messages(conversation_id)
    return ConversationDetail(
        **ConversationOut.model_validate(conversation).model_dump(),
        messages=[MessageOut.model_validate(message) for message in messages],
    )


@router.put("/{conversation_id}", response_model=ConversationOut)
def update_conversation(
    conversation_id: int, payload: ConversationUpdate, user: CurrentUser
) -> Conversation:
    conversation = conversations.update_conversation(
        int(user.id), conversation_id, title=payload.title
    )
    if conversation is None:
        raise NotFoundError("conversation")
    return conversation


@router.delete("/{conversation_id}")
def delete_conversation(conversation_id: int, user: CurrentUser) -> dict:
    if not conversations.delete_conversation(int(user.id), conversation_id):
        raise NotFoundError("conversation")
    return {"message": "Conversation deleted successfully"}


@router.post(
    "/{conversation_id}/messages", response_model=SendMessageResponse, status_code=201
)
async def send_message(
    conversation_id: int,
    payload: SendMessageRequest,
    user: CurrentUser,
    orchestrator: Orchestrator,
) -> SendMessageResponse:
    result = await orchestrator.send_message(
        int(user.id), conversation_id, payload.content, payload.provider, payload.model
    )
    return SendMessageResponse(
        user_message=MessageOut.model_validate(result.user_message),
        assistant_message=MessageOut.model_validate(result.assistant_message),
    )
