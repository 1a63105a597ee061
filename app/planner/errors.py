"""Domain-specific errors for schedule planning."""


class PlannerError(Exception):
    """Base exception for all planning errors."""

    code = "PLANNER_ERROR"


class InvalidFrequencyError(PlannerError, ValueError):
    """Raised when a weekly frequency is outside 1..7."""

    code = "INVALID_FREQUENCY"

    def __init__(self, frequency: object):
        self.frequency = frequency
        self.message = f"Frequency must be an integer between 1 and 7, got {frequency!r}"
        super().__init__(self.message)


class EmptyTemplateError(PlannerError, ValueError):
    """Raised when a weekly template has no slots to assign."""

    code = "EMPTY_TEMPLATE"

    def __init__(self):
        self.message = "Weekly template must contain at least one slot"
        super().__init__(self.message)
