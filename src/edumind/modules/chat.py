"""Tutor chat module: the current conversation plus archived sessions."""

import structlog
from pydantic import ValidationError

from edumind.errors import InputValidationError, InvalidTransitionError
from edumind.gateway.client import build_message_parts
from edumind.models.chat import Attachment, ChatMessage, ChatSession
from edumind.modules.views import PanelView
from edumind.session.context import StudySession
from edumind.storage.history import HistoryStore
from edumind.storage.store import StoreKey

logger = structlog.get_logger()

CHAT_AUTOSAVE_INTERVAL = 4
MIN_CHECKPOINT_MESSAGES = 2
EMPTY_REPLY_TEXT = "I am sorry, I could not generate a response."
ATTACHMENT_PROMPT = "Analyze this document/image for me."


def visible_text(text: str, attachment: Attachment | None) -> str:
    """Text shown for a user message, noting any attachment by name."""
    if attachment is None:
        return text
    if text.strip():
        return f"{text}\n\n[Attachment: {attachment.name}]"
    return f"[Attachment: {attachment.name}]"


class ChatModule:
    """Current chat with periodic checkpoints into the chat history.

    The current conversation is mirrored to its own store key on every
    change. Whenever the message count reaches a multiple of the autosave
    interval, the conversation is upserted into history under the id of its
    first message.

    Args:
        session: Session context providing the store.
        gateway: AI gateway answering messages.
        autosave_interval: Checkpoint every N messages.
        attachment_prompt: Text sent when a file is attached without a message.
    """

    def __init__(
        self,
        session: StudySession,
        gateway,
        autosave_interval: int = CHAT_AUTOSAVE_INTERVAL,
        attachment_prompt: str = ATTACHMENT_PROMPT,
    ):
        self.session = session
        self.gateway = gateway
        self.autosave_interval = autosave_interval
        self.attachment_prompt = attachment_prompt
        self.history: HistoryStore[ChatSession] = HistoryStore(
            session.store, StoreKey.CHAT_HISTORY, ChatSession
        )
        self.view = PanelView.ACTIVE
        self.is_loading = False
        self.messages: list[ChatMessage] = self._load_current()

    def _load_current(self) -> list[ChatMessage]:
        raw = self.session.store.get(StoreKey.CURRENT_CHAT)
        if not isinstance(raw, list):
            return []
        try:
            return [ChatMessage.model_validate(m) for m in raw]
        except ValidationError as e:
            logger.warning("current_chat_unreadable", error=str(e))
            return []

    def _persist_current(self) -> None:
        self.session.store.set(
            StoreKey.CURRENT_CHAT,
            [m.model_dump(mode="json") for m in self.messages],
        )

    def _add_message(self, message: ChatMessage) -> None:
        self.messages.append(message)
        self._persist_current()
        if self.should_autosave(len(self.messages)):
            self.checkpoint()

    def _require_idle(self) -> None:
        if self.is_loading:
            raise InvalidTransitionError("A reply is still pending")

    def should_autosave(self, message_count: int) -> bool:
        return (
            message_count >= MIN_CHECKPOINT_MESSAGES
            and message_count % self.autosave_interval == 0
        )

    async def send_message(
        self, text: str, attachment: Attachment | None = None
    ) -> ChatMessage:
        """Send one user turn and append it together with the tutor's reply.

        Nothing is committed if the gateway fails; the caller keeps its
        input and may resend.

        Returns:
            The tutor's reply message.
        """
        if self.view != PanelView.ACTIVE:
            raise InvalidTransitionError("Close the history to send messages")
        self._require_idle()
        text = text or ""
        if not text.strip() and attachment is None:
            raise InputValidationError("Type a message or attach a file")

        parts = build_message_parts(text, attachment, self.attachment_prompt)
        user_message = ChatMessage(role="user", text=visible_text(text, attachment))

        self.is_loading = True
        try:
            reply = await self.gateway.solve_doubt(list(self.messages), parts)
        finally:
            self.is_loading = False

        model_message = ChatMessage(role="model", text=reply or EMPTY_REPLY_TEXT)
        self._add_message(user_message)
        self._add_message(model_message)
        return model_message

    def checkpoint(self) -> ChatSession | None:
        """Upsert the current conversation into history if it has a reply."""
        if len(self.messages) < MIN_CHECKPOINT_MESSAGES:
            return None
        archived = self.history.upsert(ChatSession.from_messages(self.messages))
        logger.info(
            "chat_checkpointed", session_id=archived.id, message_count=len(self.messages)
        )
        return archived

    def show_history(self) -> None:
        if self.view != PanelView.ACTIVE:
            raise InvalidTransitionError("History is already shown")
        self._require_idle()
        self.checkpoint()
        self.view = PanelView.HISTORY

    def close_history(self) -> None:
        if self.view != PanelView.HISTORY:
            raise InvalidTransitionError("History is not shown")
        self.view = PanelView.ACTIVE

    def restore(self, session_id: str) -> ChatSession:
        """Switch to an archived conversation, checkpointing the current one."""
        self._require_idle()
        self.history.get(session_id)
        self.checkpoint()
        archived = self.history.restore(session_id)
        self.messages = list(archived.messages)
        self._persist_current()
        self.view = PanelView.ACTIVE
        logger.info("chat_restored", session_id=session_id)
        return archived

    def clear_current(self) -> None:
        """Archive and then drop the current conversation."""
        self._require_idle()
        self.checkpoint()
        self.messages = []
        self.session.store.remove(StoreKey.CURRENT_CHAT)

    def clear_history(self) -> None:
        self.history.clear_all()
        logger.info("chat_history_cleared")

