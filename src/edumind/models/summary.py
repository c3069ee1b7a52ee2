"""Summary history record."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from edumind.models.common import new_record_id, now_ms


class SummaryRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = Field(default_factory=new_record_id)
    original_text: str
    summary: str
    timestamp: int = Field(default_factory=now_ms)
