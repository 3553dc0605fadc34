from pydantic import BaseModel, ConfigDict, Field


class FlaggedSubmission(BaseModel):
    """
    Scored student pair with every model input kept for review.

    Component fields are None when the value could not be determined,
    in which case ``warnings`` says why and the probability is 0.
    """

    model_config = ConfigDict(frozen=True)

    student1: str
    student2: str
    probability: float = Field(ge=0, le=0.999)
    student1_score: float | None = None
    student2_score: float | None = None
    student1_variant: str | None = None
    student2_variant: str | None = None
    variant_similarity: float | None = None
    response_similarity: float
    class_average_score: float | None = None
    student1_biserial: float | None = None
    student2_biserial: float | None = None
    student1_cross_grade: float | None = None
    student2_cross_grade: float | None = None
    student1_grade_change: float | None = None
    student2_grade_change: float | None = None
    warnings: tuple[str, ...] = ()

    @property
    def is_same_variant(self) -> bool:
        return (
            self.student1_variant is not None
            and self.student1_variant == self.student2_variant
        )


class FlaggingSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_flagged: int
    unique_students_involved: int
    average_probability: float
    average_similarity: float
