"""
Core models and utilities.
"""

from tapvote.core.models import Question, QuestionType, Questionnaire, Section
from tapvote.core.utils import configure_logging, generate_id

__all__ = [
    "Question",
    "QuestionType",
    "Questionnaire",
    "Section",
    "configure_logging",
    "generate_id",
]
