"""
Error kinds raised by the clearing pipeline.

An empty book on either side is not an error: it resolves to a no-trade
outcome. Only malformed input and broken conservation are exceptional.
"""


class ClearingError(Exception):
    """Base class for clearing engine errors."""


class MalformedOrderError(ClearingError, ValueError):
    """
    A participant does not describe exactly one valid order.

    Raised before the round enters the pipeline; the caller must fix the
    round's input. Re-running the same input reproduces the error.
    """

    def __init__(self, participant_id: int | None, reason: str) -> None:
        self.participant_id = participant_id
        self.reason = reason
        super().__init__(f"participant {participant_id}: {reason}")


class InvariantViolationError(ClearingError, AssertionError):
    """
    Post-round balance or quantity conservation failed.

    This is a defect in the settlement arithmetic, never bad input, so it
    must not be caught and ignored.
    """

    def __init__(self, check: str, detail: str) -> None:
        self.check = check
        self.detail = detail
        super().__init__(f"{check}: {detail}")
