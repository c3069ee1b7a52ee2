"""User profile model for tracking quiz performance across sessions."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PerformanceProfile(BaseModel):
    """Running quiz performance, updated incrementally after each quiz."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_quizzes: int = Field(default=0, ge=0)
    average_score: float = Field(default=0.0, ge=0.0, le=100.0)
    weak_topics: list[str] = Field(default_factory=list)


class UserProfile(BaseModel):
    id: str
    name: str
    email: str
    progress: PerformanceProfile = Field(default_factory=PerformanceProfile)
