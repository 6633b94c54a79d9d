"""
Pydantic models for the legal chat contracts.
"""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from legallyeasy.models.documents import DocumentReference


class LegalChatRequest(BaseModel):
    """Request body for the POST /chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    query: str | None = Field(None, description="The user's legal question")
    document_data_uri: str | None = Field(
        None,
        alias="documentDataUri",
        description="Optional document as data:<mimetype>;base64,<payload>",
    )
    document_name: str | None = Field(
        None, alias="documentName", description="Filename of the attached document"
    )


class ChatQuery(BaseModel):
    """A validated legal question with an optional grounding document."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., description="The user's legal question.")
    document: DocumentReference | None = None

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a question.")
        return value


class ChatAnswer(BaseModel):
    """Response body from the POST /chat endpoint."""

    response: str = Field(..., description="The AI's answer to the legal question.")

    @field_validator("response")
    @classmethod
    def _response_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("response must be a non-empty string")
        return value


class ChatMessage(BaseModel):
    """A single message in a caller-owned transcript."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"] = Field(
        ..., description="Message role: 'user' or 'assistant'"
    )
    content: str = Field(..., description="Message content")


class ChatTranscript:
    """Append-only, chronologically ordered chat log kept by the caller."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    def append(self, role: Literal["user", "assistant"], content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> ChatMessage | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(tuple(self._messages))
