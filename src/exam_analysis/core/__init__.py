"""
Core shared types and utilities for exam analysis.

This module provides the input records and answer normalization used by
both the item analysis engine and the integrity flagging engine.
"""

from exam_analysis.core.answers import (
    letter_index,
    normalize_answer,
    option_letter,
    resolve_correct_answer,
)
from exam_analysis.core.data_models import (
    ExamVariant,
    QuestionResponse,
    QuestionType,
    StudentResponse,
    VariantQuestion,
)
from exam_analysis.core.utils import clamp, safe_mean

__all__ = [
    "clamp",
    "ExamVariant",
    "letter_index",
    "normalize_answer",
    "option_letter",
    "QuestionResponse",
    "QuestionType",
    "resolve_correct_answer",
    "safe_mean",
    "StudentResponse",
    "VariantQuestion",
]
