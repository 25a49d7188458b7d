"""Webinars, learning-control questions and participant results."""

from webinar_platform.webinars.models import Question, QuizResult, QuizSubmission, Webinar
from webinar_platform.webinars.quiz import is_valid_email, percentage, score_answers
from webinar_platform.webinars.service import WebinarService

__all__ = [
    "Question",
    "QuizResult",
    "QuizSubmission",
    "Webinar",
    "WebinarService",
    "is_valid_email",
    "percentage",
    "score_answers",
]
