"""
Core data models for questionnaires.

These describe the documents clients send and receive. Request bodies are
stored exactly as received, so the models document the shape rather than
enforce it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class QuestionType(str, Enum):
    """Kind of answer a question expects."""
    
    FREE_RESPONSE = "free_response"
    MULTIPLE_CHOICE = "multiple_choice"


class Question(BaseModel):
    """A single question and its answer text."""
    
    type: QuestionType = QuestionType.FREE_RESPONSE
    question: str
    answer: str = ""


class Section(BaseModel):
    """A named, ordered group of questions."""
    
    name: str
    questions: list[Question] = Field(default_factory=list)


class Questionnaire(BaseModel):
    """
    A questionnaire document.
    
    The id is absent on append-style creation (the store key identifies
    the document) and set by the server on explicit-id creation.
    """
    
    id: str | None = None
    name: str
    sections: list[Section] = Field(default_factory=list)
    
    def to_document(self) -> dict:
        """JSON-ready dict without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
