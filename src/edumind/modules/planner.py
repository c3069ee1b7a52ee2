"""Study planner module."""

import structlog

from edumind.errors import InputValidationError, InvalidTransitionError
from edumind.models.plan import DailyPlan, StudyPlanRecord
from edumind.modules.views import PanelView
from edumind.session.context import StudySession
from edumind.storage.history import HistoryStore
from edumind.storage.store import StoreKey

logger = structlog.get_logger()

DEFAULT_DAYS = 7
DEFAULT_HOURS = 4


def _positive_int(value: int | str, field: str) -> int:
    if isinstance(value, bool):
        raise InputValidationError(f"{field} must be a whole number of at least 1")
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"{field} must be a whole number of at least 1")
    if number < 1:
        raise InputValidationError(f"{field} must be a whole number of at least 1")
    return number


class PlannerModule:
    """Builds day-by-day study plans for an upcoming exam."""

    def __init__(self, session: StudySession, gateway):
        self.session = session
        self.gateway = gateway
        self.history: HistoryStore[StudyPlanRecord] = HistoryStore(
            session.store, StoreKey.PLAN_HISTORY, StudyPlanRecord
        )
        self.view = PanelView.ACTIVE
        self.is_loading = False
        self.reset()

    async def generate_plan(
        self, exam_name: str, days: int | str = DEFAULT_DAYS, hours: int | str = DEFAULT_HOURS
    ) -> StudyPlanRecord:
        if self.view != PanelView.ACTIVE:
            raise InvalidTransitionError("Close the history to create a plan")
        if self.is_loading:
            raise InvalidTransitionError("A plan is still being generated")
        exam_name = (exam_name or "").strip()
        if not exam_name:
            raise InputValidationError("Enter the exam you are preparing for")
        days = _positive_int(days, "Days")
        hours = _positive_int(hours, "Hours per day")

        self.is_loading = True
        try:
            plan = await self.gateway.generate_study_plan(exam_name, days, hours)
        finally:
            self.is_loading = False

        record = self.history.append(
            StudyPlanRecord(exam_name=exam_name, days=days, hours=hours, plan=plan)
        )
        self.exam_name, self.days, self.hours = exam_name, days, hours
        self.plan = list(plan)
        logger.info("study_plan_saved", record_id=record.id, exam_name=exam_name)
        return record

    def show_history(self) -> None:
        if self.view != PanelView.ACTIVE:
            raise InvalidTransitionError("History is already shown")
        if self.is_loading:
            raise InvalidTransitionError("A plan is still being generated")
        self.view = PanelView.HISTORY

    def close_history(self) -> None:
        if self.view != PanelView.HISTORY:
            raise InvalidTransitionError("History is not shown")
        self.view = PanelView.ACTIVE

    def load(self, record_id: str) -> StudyPlanRecord:
        record = self.history.restore(record_id)
        self.exam_name = record.exam_name
        self.days = record.days
        self.hours = record.hours
        self.plan = list(record.plan)
        self.view = PanelView.ACTIVE
        return record

    def reset(self) -> None:
        self.exam_name = ""
        self.days = DEFAULT_DAYS
        self.hours = DEFAULT_HOURS
        self.plan: list[DailyPlan] = []

    def clear_history(self) -> None:
        self.history.clear_all()
        logger.info("plan_history_cleared")
