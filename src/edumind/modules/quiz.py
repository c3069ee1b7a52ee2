"""Quiz module: setup -> quiz -> result, with a browsable attempt history."""

from typing import Any

import structlog

from edumind.assessment.grading import AnswerReview, review_answers, score_quiz
from edumind.errors import GatewayError, InputValidationError, InvalidTransitionError
from edumind.models.quiz import UNANSWERED, Difficulty, QuizAttemptRecord, QuizQuestion
from edumind.modules.views import QuizView
from edumind.session.context import StudySession
from edumind.storage.history import HistoryStore
from edumind.storage.store import StoreKey

logger = structlog.get_logger()

MAX_QUIZ_QUESTIONS = 50


def parse_question_count(value: int | str) -> int:
    """Parse the requested question count; must be a whole number >= 1."""
    if isinstance(value, bool):
        raise InputValidationError("Please enter a valid number of questions (minimum 1).")
    try:
        count = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise InputValidationError("Please enter a valid number of questions (minimum 1).")
    if count < 1:
        raise InputValidationError("Please enter a valid number of questions (minimum 1).")
    return count


class QuizModule:
    """State machine behind the quiz screen.

    Views: setup, quiz (answering), result and history. Finishing a quiz
    records it in history and updates the user's progress exactly once;
    reloading a past attempt only replays it.

    Args:
        session: Current session context, receives finished quiz scores.
        gateway: AI gateway used to generate questions.
        max_questions: Upper bound on the count sent to the gateway.
    """

    def __init__(
        self,
        session: StudySession,
        gateway,
        max_questions: int = MAX_QUIZ_QUESTIONS,
    ):
        self.session = session
        self.gateway = gateway
        self.max_questions = max_questions
        self.history: HistoryStore[QuizAttemptRecord] = HistoryStore(
            session.store, StoreKey.QUIZ_HISTORY, QuizAttemptRecord
        )

        self.view = QuizView.SETUP
        self.topic = ""
        self.difficulty = Difficulty.MEDIUM
        self.questions: list[QuizQuestion] = []
        self.answers: list[int] = []
        self.current_index = 0
        self.score: float | None = None
        self.is_loading = False

    def _require_view(self, *views: QuizView) -> None:
        if self.view not in views:
            raise InvalidTransitionError(
                f"Not allowed in the {self.view} view"
            )

    @property
    def current_answer(self) -> int:
        return self.answers[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == len(self.questions) - 1

    async def generate(
        self,
        topic: str,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        num_questions: int | str = 10,
    ) -> list[QuizQuestion]:
        """Ask the gateway for a quiz and start answering it.

        The requested count is clamped to `max_questions`. If the gateway
        fails, the module stays in setup and GatewayError propagates.
        """
        self._require_view(QuizView.SETUP)
        if self.is_loading:
            raise InvalidTransitionError("A quiz is already being generated")
        topic = (topic or "").strip()
        if not topic:
            raise InputValidationError("Please enter a topic.")
        count = parse_question_count(num_questions)
        try:
            difficulty = Difficulty(difficulty)
        except ValueError:
            raise InputValidationError(f"Unknown difficulty: {difficulty}")

        safe_count = min(count, self.max_questions)
        self.is_loading = True
        try:
            questions = await self.gateway.generate_quiz(topic, difficulty, safe_count)
        finally:
            self.is_loading = False
        if not questions:
            raise GatewayError("Quiz generation returned no questions")

        self.topic = topic
        self.difficulty = difficulty
        self.questions = list(questions)
        self.answers = [UNANSWERED] * len(self.questions)
        self.current_index = 0
        self.score = None
        self.view = QuizView.QUIZ
        logger.info("quiz_started", topic=topic, requested=count, count=len(self.questions))
        return self.questions

    def select_answer(self, option: int) -> None:
        self._require_view(QuizView.QUIZ)
        options = self.questions[self.current_index].options
        if isinstance(option, bool) or not 0 <= option < len(options):
            raise InputValidationError(f"Option {option} is out of range")
        self.answers[self.current_index] = option

    def previous(self) -> int:
        self._require_view(QuizView.QUIZ)
        if self.current_index == 0:
            raise InvalidTransitionError("Already at the first question")
        self.current_index -= 1
        return self.current_index

    def next(self) -> int:
        self._require_view(QuizView.QUIZ)
        if self.current_answer == UNANSWERED:
            raise InvalidTransitionError("Select an answer before moving on")
        if self.is_last_question:
            raise InvalidTransitionError("Last question reached; finish the quiz")
        self.current_index += 1
        return self.current_index

    def finish(self) -> QuizAttemptRecord:
        """Score the quiz, store the attempt and update the user's progress."""
        self._require_view(QuizView.QUIZ)
        if not self.is_last_question:
            raise InvalidTransitionError("The quiz can only be finished from the last question")
        if self.current_answer == UNANSWERED:
            raise InvalidTransitionError("Select an answer before finishing")

        score = score_quiz(self.questions, self.answers)
        record = self.history.append(
            QuizAttemptRecord(
                topic=self.topic,
                difficulty=self.difficulty,
                num_questions=len(self.questions),
                score=score,
                questions=self.questions,
                user_answers=self.answers,
            )
        )
        self.score = score
        self.view = QuizView.RESULT
        self.session.record_quiz_result(score, self.topic)
        logger.info("quiz_finished", topic=self.topic, score=round(score, 1), record_id=record.id)
        return record

    def try_another(self) -> None:
        self._require_view(QuizView.RESULT)
        self.questions = []
        self.answers = []
        self.current_index = 0
        self.score = None
        self.view = QuizView.SETUP

    def show_history(self) -> None:
        self._require_view(QuizView.SETUP, QuizView.QUIZ, QuizView.RESULT)
        if self.is_loading:
            raise InvalidTransitionError("A quiz is still being generated")
        self.view = QuizView.HISTORY

    def close_history(self) -> None:
        self._require_view(QuizView.HISTORY)
        self.view = QuizView.SETUP

    def reload(self, record_id: str) -> QuizAttemptRecord:
        """Show a past attempt's result. Progress is not touched."""
        self._require_view(QuizView.HISTORY)
        record = self.history.restore(record_id)
        self.topic = record.topic
        self.difficulty = record.difficulty
        self.questions = list(record.questions)
        self.answers = list(record.user_answers)
        self.current_index = 0
        self.score = record.score
        self.view = QuizView.RESULT
        return record

    def clear_history(self) -> None:
        self.history.clear_all()
        logger.info("quiz_history_cleared")

    def review(self) -> list[AnswerReview]:
        self._require_view(QuizView.RESULT)
        return review_answers(self.questions, self.answers)

    def snapshot(self) -> dict[str, Any]:
        """Serializable view state; answers stay hidden while answering."""
        state: dict[str, Any] = {
            "view": self.view.value,
            "topic": self.topic,
            "difficulty": self.difficulty.value,
            "history_count": len(self.history),
        }
        if self.view == QuizView.QUIZ:
            q = self.questions[self.current_index]
            state.update({
                "current_index": self.current_index,
                "total_questions": len(self.questions),
                "question": {"question": q.question, "options": q.options},
                "answers": list(self.answers),
            })
        elif self.view == QuizView.RESULT:
            state.update({
                "score": self.score,
                "total_questions": len(self.questions),
                "review": [r.model_dump(mode="json") for r in self.review()],
            })
        return state
