"""Quiz scoring and per-question answer review."""

from collections.abc import Sequence
from enum import StrEnum

from pydantic import BaseModel

from edumind.models.quiz import UNANSWERED, QuizQuestion


class AnswerStatus(StrEnum):
    CORRECT = "Correct"
    INCORRECT = "Incorrect"
    UNANSWERED = "Unanswered"


class AnswerReview(BaseModel):
    index: int
    question: str
    options: list[str]
    chosen: int
    correct_answer: int
    status: AnswerStatus
    explanation: str = ""


def _answer_at(answers: Sequence[int], index: int) -> int:
    return answers[index] if index < len(answers) else UNANSWERED


def count_correct(questions: Sequence[QuizQuestion], answers: Sequence[int]) -> int:
    total = 0
    for i, q in enumerate(questions):
        chosen = _answer_at(answers, i)
        if chosen != UNANSWERED and chosen == q.correct_answer:
            total += 1
    return total


def score_quiz(questions: Sequence[QuizQuestion], answers: Sequence[int]) -> float:
    """Percentage of questions whose chosen option is the correct one."""
    if not questions:
        return 0.0
    return count_correct(questions, answers) / len(questions) * 100


def review_answers(
    questions: Sequence[QuizQuestion], answers: Sequence[int]
) -> list[AnswerReview]:
    reviews = []
    for i, q in enumerate(questions):
        chosen = _answer_at(answers, i)
        if chosen == UNANSWERED:
            status = AnswerStatus.UNANSWERED
        elif chosen == q.correct_answer:
            status = AnswerStatus.CORRECT
        else:
            status = AnswerStatus.INCORRECT
        reviews.append(
            AnswerReview(
                index=i,
                question=q.question,
                options=list(q.options),
                chosen=chosen,
                correct_answer=q.correct_answer,
                status=status,
                explanation=q.explanation,
            )
        )
    return reviews
