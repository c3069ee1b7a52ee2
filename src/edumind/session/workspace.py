"""Wires the session context, gateway and study modules over one store."""

import functools

from edumind.config import Settings, get_settings
from edumind.gateway.client import StudyGateway
from edumind.gateway.prompts import load_prompts
from edumind.modules.chat import ChatModule
from edumind.modules.planner import PlannerModule
from edumind.modules.quiz import QuizModule
from edumind.modules.summarizer import SummarizerModule
from edumind.session.context import StudySession
from edumind.storage.store import JsonFileStore, KeyValueStore


class StudyWorkspace:
    """Everything one user works with: their session and the four modules.

    Args:
        store: Store shared by the session and all histories.
        gateway: AI gateway used by every module.
        settings: Thresholds and limits; defaults are used when omitted.
    """

    def __init__(self, store: KeyValueStore, gateway, settings: Settings | None = None):
        self.store = store
        self.gateway = gateway
        kwargs = {}
        if settings is not None:
            kwargs = {
                "weak_below": settings.weak_topic_threshold,
                "strong_at": settings.strong_topic_threshold,
            }
        self.session = StudySession(store, **kwargs)

        chat_kwargs = {}
        if settings is not None:
            chat_kwargs["autosave_interval"] = settings.chat_autosave_interval
        if isinstance(gateway, StudyGateway):
            chat_kwargs["attachment_prompt"] = gateway.attachment_prompt
        self.chat = ChatModule(self.session, gateway, **chat_kwargs)

        quiz_kwargs = {}
        if settings is not None:
            quiz_kwargs["max_questions"] = settings.max_quiz_questions
        self.quiz = QuizModule(self.session, gateway, **quiz_kwargs)

        self.summarizer = SummarizerModule(self.session, gateway)
        self.planner = PlannerModule(self.session, gateway)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StudyWorkspace":
        gateway = StudyGateway(
            api_key=settings.openai_api_key,
            chat_model=settings.chat_model,
            generation_model=settings.generation_model,
            prompts=load_prompts(settings.prompts_path),
        )
        return cls(JsonFileStore(settings.store_dir), gateway, settings)


@functools.lru_cache
def get_workspace() -> StudyWorkspace:
    """Process-wide workspace (single user per store)."""
    return StudyWorkspace.from_settings(get_settings())
