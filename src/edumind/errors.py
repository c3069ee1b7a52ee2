"""Exception types shared by the study modules and the HTTP layer."""


class EduMindError(Exception):
    """Base class for all application errors."""


class InputValidationError(EduMindError):
    """User input rejected before any gateway call; state is unchanged."""


class InvalidTransitionError(EduMindError):
    """Action not legal in the module's current view or position."""


class GatewayError(EduMindError):
    """The AI gateway failed to return a complete, well-formed response."""


class RecordNotFoundError(EduMindError, KeyError):
    """No history record with the requested id."""

    def __init__(self, record_id: str):
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"History record not found: {self.record_id}"
