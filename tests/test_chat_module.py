"""Tests for the chat module: autosave checkpoints, restore and failures."""

import asyncio

import pytest

from edumind.errors import GatewayError, InputValidationError, InvalidTransitionError
from edumind.models.chat import Attachment, ChatMessage, ChatSession, session_title
from edumind.modules.chat import EMPTY_REPLY_TEXT, ChatModule
from edumind.modules.views import PanelView
from edumind.storage.store import StoreKey


@pytest.fixture
def chat(session, gateway):
    return ChatModule(session, gateway)


async def _rounds(chat, n):
    for i in range(n):
        await chat.send_message(f"question {i}")


class TestAutosave:
    @pytest.mark.parametrize("count", [4, 8, 12, 16])
    def test_fires_at_multiples_of_four(self, chat, count):
        assert chat.should_autosave(count)

    @pytest.mark.parametrize("count", [0, 1, 2, 3, 5, 6, 7, 9, 10])
    def test_never_fires_elsewhere(self, chat, count):
        assert not chat.should_autosave(count)

    async def test_no_checkpoint_after_first_round(self, chat):
        await _rounds(chat, 1)
        assert len(chat.history) == 0

    async def test_checkpoint_after_second_round(self, chat, store):
        await _rounds(chat, 2)
        assert len(chat.history) == 1
        archived = chat.history.items[0]
        assert archived.id == chat.messages[0].id
        assert len(archived.messages) == 4
        assert store.get(StoreKey.CHAT_HISTORY)[0]["id"] == archived.id

    async def test_later_checkpoints_update_same_entry(self, chat):
        await _rounds(chat, 6)
        assert len(chat.history) == 1
        assert len(chat.history.items[0].messages) == 12


class TestSendMessage:
    async def test_appends_user_and_model_messages(self, chat, gateway, store):
        reply = await chat.send_message("What is a derivative?")
        assert [m.role for m in chat.messages] == ["user", "model"]
        assert chat.messages[0].text == "What is a derivative?"
        assert reply.text == "Here is the explanation."
        assert len(store.get(StoreKey.CURRENT_CHAT)) == 2

    async def test_prior_history_sent_to_gateway(self, chat, gateway):
        await chat.send_message("first")
        await chat.send_message("second")
        history, parts = gateway.solve_doubt.await_args.args
        assert [m.text for m in history] == ["first", "Here is the explanation."]
        assert parts == [{"type": "text", "text": "second"}]

    async def test_empty_message_rejected(self, chat, gateway):
        with pytest.raises(InputValidationError):
            await chat.send_message("   ")
        gateway.solve_doubt.assert_not_awaited()

    async def test_attachment_only(self, chat, gateway):
        attachment = Attachment(data="aGVsbG8=", mime_type="image/png", name="graph.png")
        await chat.send_message("", attachment)
        _, parts = gateway.solve_doubt.await_args.args
        assert parts[0]["type"] == "image_url"
        assert parts[0]["image_url"]["url"] == "data:image/png;base64,aGVsbG8="
        assert parts[1] == {"type": "text", "text": "Analyze this document/image for me."}
        assert chat.messages[0].text == "[Attachment: graph.png]"

    async def test_text_with_document(self, chat, gateway):
        attachment = Attachment(data="JVBERi0=", mime_type="application/pdf", name="notes.pdf")
        await chat.send_message("Explain this", attachment)
        _, parts = gateway.solve_doubt.await_args.args
        assert parts[0]["type"] == "file"
        assert parts[0]["file"]["filename"] == "notes.pdf"
        assert chat.messages[0].text == "Explain this\n\n[Attachment: notes.pdf]"

    async def test_empty_reply_replaced(self, chat, gateway):
        gateway.solve_doubt.return_value = ""
        reply = await chat.send_message("hello")
        assert reply.text == EMPTY_REPLY_TEXT

    async def test_gateway_failure_commits_nothing(self, chat, gateway, store):
        await chat.send_message("first")
        gateway.solve_doubt.side_effect = GatewayError("down")
        with pytest.raises(GatewayError):
            await chat.send_message("second")
        assert len(chat.messages) == 2
        assert len(store.get(StoreKey.CURRENT_CHAT)) == 2
        assert chat.is_loading is False

    async def test_not_allowed_in_history_view(self, chat):
        chat.show_history()
        with pytest.raises(InvalidTransitionError):
            await chat.send_message("hello")


class TestPersistence:
    async def test_current_chat_restored_on_construction(self, chat, session, gateway):
        await chat.send_message("hello")
        again = ChatModule(session, gateway)
        assert [m.id for m in again.messages] == [m.id for m in chat.messages]

    def test_unreadable_current_chat_is_empty(self, session, gateway, store):
        store.set(StoreKey.CURRENT_CHAT, [{"role": "robot"}])
        assert ChatModule(session, gateway).messages == []


class TestHistoryView:
    async def test_show_history_checkpoints(self, chat):
        await _rounds(chat, 1)
        chat.show_history()
        assert chat.view == PanelView.HISTORY
        assert len(chat.history) == 1
        chat.close_history()
        assert chat.view == PanelView.ACTIVE

    def test_show_history_with_single_message_does_not_archive(self, chat):
        chat.messages = [ChatMessage(role="user", text="alone")]
        chat.show_history()
        assert len(chat.history) == 0

    def test_close_history_only_from_history(self, chat):
        with pytest.raises(InvalidTransitionError):
            chat.close_history()


class TestRestore:
    async def test_restore_checkpoints_current_first(self, chat, gateway, session):
        old = ChatSession.from_messages([
            ChatMessage(id="1", role="user", text="old question"),
            ChatMessage(id="2", role="model", text="old answer"),
        ])
        chat.history.append(old)
        await _rounds(chat, 1)
        current_id = chat.messages[0].id

        chat.show_history()
        restored = chat.restore("1")

        assert restored.id == "1"
        assert chat.view == PanelView.ACTIVE
        assert [m.text for m in chat.messages] == ["old question", "old answer"]
        assert {s.id for s in chat.history} == {"1", current_id}
        assert session.store.get(StoreKey.CURRENT_CHAT)[0]["id"] == "1"

    async def test_restore_unknown_id(self, chat):
        await _rounds(chat, 1)
        with pytest.raises(KeyError):
            chat.restore("missing")
        assert len(chat.history) == 0

    async def test_restoring_twice_does_not_duplicate(self, chat):
        await _rounds(chat, 2)
        session_id = chat.messages[0].id
        chat.restore(session_id)
        chat.restore(session_id)
        assert len(chat.history) == 1


class TestPendingReply:
    @pytest.fixture
    def release(self, gateway):
        event = asyncio.Event()

        async def slow_reply(history, parts):
            await event.wait()
            return "late reply"

        gateway.solve_doubt.side_effect = slow_reply
        return event

    async def test_restore_refused_while_reply_pending(self, chat, release):
        chat.history.append(ChatSession.from_messages([
            ChatMessage(id="1", role="user", text="old q"),
            ChatMessage(id="2", role="model", text="old a"),
        ]))
        sending = asyncio.create_task(chat.send_message("new q"))
        await asyncio.sleep(0)
        assert chat.is_loading

        with pytest.raises(InvalidTransitionError):
            chat.restore("1")
        with pytest.raises(InvalidTransitionError):
            chat.clear_current()
        with pytest.raises(InvalidTransitionError):
            chat.show_history()

        release.set()
        await sending
        assert [m.text for m in chat.messages] == ["new q", "late reply"]
        assert [m.text for m in chat.history.get("1").messages] == ["old q", "old a"]

    async def test_second_send_refused_while_pending(self, chat, release):
        sending = asyncio.create_task(chat.send_message("first"))
        await asyncio.sleep(0)
        with pytest.raises(InvalidTransitionError):
            await chat.send_message("second")
        release.set()
        await sending
        assert len(chat.messages) == 2


class TestClear:
    async def test_clear_current_archives_then_empties(self, chat, store):
        await _rounds(chat, 1)
        chat.clear_current()
        assert chat.messages == []
        assert store.get(StoreKey.CURRENT_CHAT) is None
        assert len(chat.history) == 1

    async def test_clear_history(self, chat, session, gateway):
        await _rounds(chat, 2)
        chat.clear_history()
        assert len(ChatModule(session, gateway).history) == 0


class TestSessionTitle:
    def test_short_title(self):
        assert session_title("Short") == "Short"

    def test_long_title_ellipsized(self):
        text = "x" * 31
        assert session_title(text) == "x" * 30 + "..."

    def test_exactly_thirty(self):
        assert session_title("y" * 30) == "y" * 30
