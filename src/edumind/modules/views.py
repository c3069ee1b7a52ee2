"""View states of the study modules."""

from enum import StrEnum


class QuizView(StrEnum):
    SETUP = "setup"
    QUIZ = "quiz"
    RESULT = "result"
    HISTORY = "history"


class PanelView(StrEnum):
    """Two-state toggle used by chat, summarizer and planner."""

    ACTIVE = "active"
    HISTORY = "history"
