"""Note summarizer module."""

import structlog

from edumind.errors import InputValidationError, InvalidTransitionError
from edumind.models.summary import SummaryRecord
from edumind.modules.views import PanelView
from edumind.session.context import StudySession
from edumind.storage.history import HistoryStore
from edumind.storage.store import StoreKey

logger = structlog.get_logger()


class SummarizerModule:
    """Summarizes notes; every successful summary is appended to history."""

    def __init__(self, session: StudySession, gateway):
        self.session = session
        self.gateway = gateway
        self.history: HistoryStore[SummaryRecord] = HistoryStore(
            session.store, StoreKey.SUMMARY_HISTORY, SummaryRecord
        )
        self.view = PanelView.ACTIVE
        self.is_loading = False
        self.text = ""
        self.summary = ""

    async def summarize(self, text: str) -> SummaryRecord:
        if self.view != PanelView.ACTIVE:
            raise InvalidTransitionError("Close the history to summarize")
        if self.is_loading:
            raise InvalidTransitionError("A summary is still pending")
        if not (text or "").strip():
            raise InputValidationError("Paste or upload some notes first")

        self.is_loading = True
        try:
            summary = await self.gateway.summarize_notes(text)
        finally:
            self.is_loading = False

        record = self.history.append(SummaryRecord(original_text=text, summary=summary))
        self.text = text
        self.summary = summary
        logger.info("summary_saved", record_id=record.id)
        return record

    def show_history(self) -> None:
        if self.view != PanelView.ACTIVE:
            raise InvalidTransitionError("History is already shown")
        if self.is_loading:
            raise InvalidTransitionError("A summary is still pending")
        self.view = PanelView.HISTORY

    def close_history(self) -> None:
        if self.view != PanelView.HISTORY:
            raise InvalidTransitionError("History is not shown")
        self.view = PanelView.ACTIVE

    def load(self, record_id: str) -> SummaryRecord:
        """Show a stored summary alongside its original notes."""
        record = self.history.restore(record_id)
        self.text = record.original_text
        self.summary = record.summary
        self.view = PanelView.ACTIVE
        return record

    def reset(self) -> None:
        self.text = ""
        self.summary = ""

    def clear_history(self) -> None:
        self.history.clear_all()
        logger.info("summary_history_cleared")
