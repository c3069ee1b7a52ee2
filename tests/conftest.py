"""Shared fixtures: in-memory store, session and a mocked AI gateway."""

from unittest.mock import AsyncMock

import pytest

from edumind.models.plan import DailyPlan, StudyTask
from edumind.models.quiz import QuizQuestion
from edumind.session.context import StudySession
from edumind.storage.store import MemoryStore


def make_questions(correct: list[int]) -> list[QuizQuestion]:
    return [
        QuizQuestion(
            question=f"Question {i + 1}?",
            options=["A", "B", "C", "D"],
            correct_answer=answer,
            explanation=f"Because {answer}",
        )
        for i, answer in enumerate(correct)
    ]


@pytest.fixture
def questions_factory():
    return make_questions


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def session(store):
    return StudySession(store)


@pytest.fixture
def logged_in(session):
    session.login("ada@example.com", "secret")
    return session


@pytest.fixture
def gateway():
    gw = AsyncMock()
    gw.solve_doubt.return_value = "Here is the explanation."
    gw.generate_quiz.return_value = make_questions([0, 1, 2, 3, 0])
    gw.summarize_notes.return_value = "# Core Concept\nShort summary."
    gw.generate_study_plan.return_value = [
        DailyPlan(day="Day 1", tasks=[StudyTask(time="09:00", task="Read ch. 1", priority="High")]),
        DailyPlan(day="Day 2", tasks=[StudyTask(time="09:00", task="Practice", priority="Low")]),
    ]
    return gw
