"""Study plan models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from edumind.models.common import new_record_id, now_ms


class Priority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class StudyTask(BaseModel):
    time: str
    task: str
    priority: Priority = Priority.MEDIUM

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class DailyPlan(BaseModel):
    day: str
    tasks: list[StudyTask] = Field(default_factory=list)


class StudyPlanRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = Field(default_factory=new_record_id)
    exam_name: str
    days: int = Field(ge=1)
    hours: int = Field(ge=1)
    plan: list[DailyPlan] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)
