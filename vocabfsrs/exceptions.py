from typing import Optional


class SchedulerError(Exception):
    """Base exception for scheduler-related errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class InvalidRatingError(SchedulerError, ValueError):
    """Raised when a rating is not one of Again, Hard, Good or Easy."""

    pass


class InvalidCardStateError(SchedulerError, ValueError):
    """Raised when a card carries a status outside the four FSRS statuses."""

    pass


class ParameterFileError(SchedulerError):
    """Indicates an error reading or parsing a parameter set file."""

    pass

