"""Chat message and archived chat session models."""

from typing import Literal

from pydantic import BaseModel, Field

from edumind.models.common import new_record_id, now_ms

TITLE_LENGTH = 30


class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_record_id)
    role: Literal["user", "model"]
    text: str
    timestamp: int = Field(default_factory=now_ms)


class Attachment(BaseModel):
    """A file inlined into a chat message as base64 data."""

    data: str
    mime_type: str
    name: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


def session_title(first_text: str, length: int = TITLE_LENGTH) -> str:
    """First `length` characters of the opening message, ellipsized."""
    if len(first_text) > length:
        return first_text[:length] + "..."
    return first_text


class ChatSession(BaseModel):
    """An archived chat, keyed by the id of its first message."""

    id: str
    title: str
    messages: list[ChatMessage] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)

    @classmethod
    def from_messages(cls, messages: list[ChatMessage]) -> "ChatSession":
        if not messages:
            raise ValueError("A chat session needs at least one message")
        first = messages[0]
        return cls(
            id=first.id,
            title=session_title(first.text),
            messages=list(messages),
        )
