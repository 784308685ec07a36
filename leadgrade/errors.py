"""
leadgrade/errors.py — Exceptions raised by the grading engine.

Only configuration problems are raised. Per-condition anomalies (unknown
operator, missing value, malformed range) are absorbed as non-matches and
reported through the evaluation trace instead.
"""


class GradeConfigurationError(ValueError):
    """The supplied grade collection cannot produce a classification."""


class DefaultGradeMissingError(GradeConfigurationError):
    def __init__(self, grade_count: int):
        self.grade_count = grade_count
        super().__init__(
            f"No default grade configured among {grade_count} grade(s); "
            "exactly one grade must have is_default=True."
        )


class AmbiguousDefaultGradeError(GradeConfigurationError):
    def __init__(self, grade_ids: list[str]):
        self.grade_ids = grade_ids
        super().__init__(
            f"Multiple default grades configured: {', '.join(grade_ids)}; "
            "exactly one grade must have is_default=True."
        )
