"""
HTTP API.
"""

from tapvote.api.app import create_app
from tapvote.api.handlers import ApiResponse, QuestionnaireHandlers

__all__ = ["ApiResponse", "QuestionnaireHandlers", "create_app"]
