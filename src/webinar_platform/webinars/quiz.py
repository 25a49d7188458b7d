"""Learning-control scoring."""

import re
from collections.abc import Sequence

from webinar_platform.webinars.models import Question

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def percentage(score: int, total: int) -> int:
    """Whole percentage, rounded half up. Zero when there are no questions."""
    if total <= 0:
        return 0
    return (score * 200 + total) // (2 * total)


def score_answers(questions: Sequence[Question], answers: Sequence[int | None]) -> int:
    """Count answers matching the correct option at the same index.

    Answers beyond the last question are ignored; missing answers count as wrong.
    """
    return sum(
        1
        for question, answer in zip(questions, answers)
        if answer is not None and answer == question.correct_answer
    )
