class AnalysisError(Exception):
    """Base class for errors that abort an item analysis run."""


class InsufficientSampleError(AnalysisError):
    def __init__(self, sample_size: int, min_sample_size: int) -> None:
        self.sample_size = sample_size
        self.min_sample_size = min_sample_size
        super().__init__(
            f"Insufficient sample size: {sample_size} eligible students, "
            f"at least {min_sample_size} required"
        )


class EmptyQuestionSetError(AnalysisError):
    def __init__(self) -> None:
        super().__init__("No questions defined in any exam variant")


class DuplicateVariantError(AnalysisError):
    def __init__(self, variant_code: str) -> None:
        self.variant_code = variant_code
        super().__init__(
            f"Variant code {variant_code} is defined more than once"
        )


class QuestionAnalysisError(Exception):
    """Raised when statistics for a single question cannot be computed."""

    def __init__(self, question_id: str, reason: str) -> None:
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"Question {question_id}: {reason}")
