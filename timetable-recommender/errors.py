from typing import List, Optional


class ConfigurationError(ValueError):
    """Raised before any search when the credit settings or result cap are unusable."""


class MandatoryCourseConflictError(ValueError):
    """Raised when the mandatory and retake courses overlap in time with each other."""

    def __init__(self, message: str, course_codes: Optional[List[str]] = None):
        super().__init__(message)
        self.course_codes = course_codes or []
