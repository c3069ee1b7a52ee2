"""Quiz question and attempt models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from edumind.models.common import new_record_id, now_ms

UNANSWERED = -1


class Difficulty(StrEnum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuizQuestion(BaseModel):
    """A single multiple-choice question as returned by the gateway."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question: str
    options: list[str]
    correct_answer: int  # 0-indexed into options
    explanation: str = ""

    @model_validator(mode="after")
    def _check_answerable(self) -> "QuizQuestion":
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(
                f"correct_answer {self.correct_answer} is not an option index"
            )
        return self


class QuizAttemptRecord(BaseModel):
    """A completed, scored quiz. Never modified after creation."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = Field(default_factory=new_record_id)
    topic: str
    difficulty: Difficulty = Difficulty.MEDIUM
    num_questions: int
    score: float = Field(ge=0.0, le=100.0)
    questions: list[QuizQuestion] = Field(default_factory=list)
    user_answers: list[int] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)
