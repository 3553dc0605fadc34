"""
Answer normalization against a variant's option ordering.

Students may submit the option text itself, the letter of the option as
it appeared on their variant, or a boolean token for true/false items.
Every consumer compares answers in canonical option text, so the mapping
lives here and nowhere else.
"""

from collections.abc import Sequence

from exam_analysis.core.constants import (
    FALSE_TOKENS,
    OPTION_LETTERS,
    TRUE_TOKENS,
)
from exam_analysis.core.data_models import QuestionType, VariantQuestion


def option_letter(index: int) -> str:
    """Letter shown for the option at ``index`` (0 -> "A")."""
    if not 0 <= index < len(OPTION_LETTERS):
        raise ValueError(f"No option letter for index {index}")
    return OPTION_LETTERS[index]


def letter_index(letter: str) -> int | None:
    """Position of a single option letter, or None if it isn't one."""
    token = letter.strip().upper()
    if len(token) != 1 or token not in OPTION_LETTERS:
        return None
    return OPTION_LETTERS.index(token)


def _boolean_option(token: str, options: Sequence[str]) -> str | None:
    lowered = token.lower()
    if lowered in TRUE_TOKENS:
        wanted = "true"
    elif lowered in FALSE_TOKENS:
        wanted = "false"
    else:
        return None

    for option in options:
        if option.strip().lower() == wanted:
            return option
    if not options:
        return wanted.capitalize()
    return None


def normalize_answer(
    raw: str | None,
    options: Sequence[str],
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE,
) -> str | None:
    """
    Map a raw answer to canonical option text.

    Rules, in order:
    1. Blank answers are omitted and map to None.
    2. An exact (then case-insensitive) match on option text wins.
    3. A single letter A-Z maps to ``options[index]`` when in range.
    4. For true/false items, T/F/True/False map to the matching option.
    Anything else is returned stripped so it can still be counted.

    Args:
        raw: The answer as submitted.
        options: Option texts in the order the student's variant shows them.
        question_type: Type of the question.

    Returns:
        Canonical option text, the stripped raw answer if it matches no
        rule, or None when the answer is blank.
    """
    if raw is None:
        return None
    token = raw.strip()
    if not token:
        return None

    for option in options:
        if option.strip() == token:
            return option
    lowered = token.lower()
    for option in options:
        if option.strip().lower() == lowered:
            return option

    if question_type == QuestionType.TRUE_FALSE:
        boolean = _boolean_option(token, options)
        if boolean is not None:
            return boolean

    index = letter_index(token)
    if index is not None and index < len(options):
        return options[index]

    return token


def resolve_correct_answer(question: VariantQuestion) -> str | None:
    """Canonical option text of a question's key, or None if unresolvable."""
    key = normalize_answer(
        question.correct_answer, question.options, question.question_type
    )
    if key is None:
        return None
    if question.options and key not in question.options:
        return None
    return key
