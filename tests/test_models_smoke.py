"""Smoke tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from edumind.models.chat import ChatMessage, ChatSession
from edumind.models.common import new_record_id
from edumind.models.plan import Priority, StudyPlanRecord, StudyTask
from edumind.models.quiz import QuizAttemptRecord, QuizQuestion
from edumind.models.user_profile import PerformanceProfile, UserProfile


class TestRecordIds:
    def test_ids_strictly_increase(self):
        ids = [int(new_record_id()) for _ in range(200)]
        assert ids == sorted(set(ids))


class TestUserProfile:
    def test_defaults(self):
        user = UserProfile(id="x", name="n", email="e")
        assert user.progress == PerformanceProfile()

    def test_accepts_camel_case(self):
        progress = PerformanceProfile.model_validate(
            {"totalQuizzes": 3, "averageScore": 70.5, "weakTopics": ["A"]}
        )
        assert progress.total_quizzes == 3
        assert progress.weak_topics == ["A"]

    def test_average_bounded(self):
        with pytest.raises(ValidationError):
            PerformanceProfile(average_score=101)


class TestQuizModels:
    def test_question_alias(self):
        q = QuizQuestion.model_validate(
            {"question": "q", "options": ["a", "b"], "correctAnswer": 0, "explanation": "e"}
        )
        assert q.correct_answer == 0
        assert q.model_dump(by_alias=True)["correctAnswer"] == 0

    @pytest.mark.parametrize(
        "options, correct",
        [([], 0), (["only"], 0), (["a", "b"], 2), (["a", "b"], -1)],
    )
    def test_unanswerable_question_rejected(self, options, correct):
        with pytest.raises(ValidationError):
            QuizQuestion(question="q", options=options, correct_answer=correct)

    def test_attempt_is_frozen(self):
        record = QuizAttemptRecord(topic="t", num_questions=1, score=50)
        with pytest.raises(ValidationError):
            record.score = 10


class TestChatSession:
    def test_from_messages(self):
        first = ChatMessage(role="user", text="How do I integrate by parts, step by step?")
        session = ChatSession.from_messages([first, ChatMessage(role="model", text="Like so")])
        assert session.id == first.id
        assert session.title == "How do I integrate by parts, s..."
        assert len(session.messages) == 2

    def test_requires_messages(self):
        with pytest.raises(ValueError):
            ChatSession.from_messages([])


class TestPlanModels:
    def test_priority_case_insensitive(self):
        assert StudyTask(time="t", task="x", priority="low").priority == Priority.LOW

    def test_days_positive(self):
        with pytest.raises(ValidationError):
            StudyPlanRecord(exam_name="SAT", days=0, hours=1)
