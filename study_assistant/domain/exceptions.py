from typing import Optional


class NavigationError(ValueError):
    """
    Raised when a selection setter is called without its upstream selection.
    """


class NotReadyError(RuntimeError):
    """
    Raised when an operation needs selection fields that are still empty.
    """

    def __init__(self, message: str, missing: tuple[str, ...] = ()):
        super().__init__(message)
        self.message = message
        self.missing = missing


class CurriculumLookupError(LookupError):
    """
    Raised when a term, subject, unit or topic does not exist in the curriculum.
    """

    def __init__(self, message: str, level: str):
        super().__init__(message)
        self.message = message
        self.level = level


class GenerationError(RuntimeError):
    """
    Raised when the text-generation service fails, times out or returns nothing usable.
    """

    def __init__(self, message: str, transient: bool = False, attempts: int = 1, cause: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.transient = transient
        self.attempts = attempts
        self.cause = cause
