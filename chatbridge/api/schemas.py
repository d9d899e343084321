"""Request and response bodies for the JSON API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(max_length=100, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6, max_length=72)


class LoginRequest(ApiModel):
    username: str
    password: str


class UserOut(ApiModel):
    id: int
    username: str
    email: str


class AuthResponse(ApiModel):
    user: UserOut
    token: str


class CredentialCreate(ApiModel):
    provider: str = Field(min_length=1, max_length=50)
    key_name: str = Field(min_length=1, max_length=100)
    api_key: str = Field(min_length=1)


class CredentialUpdate(ApiModel):
    key_name: str | None = Field(default=None, min_length=1, max_length=100)
    api_key: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class CredentialOut(ApiModel):
    id: int
    provider: str
    key_name: str
    is_active: bool
    created_at: datetime


class ConversationCreate(ApiModel):
    title: str = Field(min_length=1, max_length=255)
    provider: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=100)


class ConversationUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)


class ConversationOut(ApiModel):
    id: int
    title: str
    provider: str
    model: str
    created_at: datetime
    updated_at: datetime


class MessageOut(ApiModel):
    id: int
    conversation_id: int
    role: Literal["user", "assistant", "system"]
    content: str
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="meta")
    created_at: datetime


class ConversationDetail(ConversationOut):
    messages: list[MessageOut] = Field(default_factory=list)


class SendMessageRequest(ApiModel):
    content: str = Field(min_length=1)
    provider: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=100)


class SendMessageResponse(ApiModel):
    user_message: MessageOut
    assistant_message: MessageOut


class ModelOut(ApiModel):
    id: str
    name: str
    max_tokens: int | None = None


class ProviderOut(ApiModel):
    id: str
    name: str
    models: list[ModelOut]
