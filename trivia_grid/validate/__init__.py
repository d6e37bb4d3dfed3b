"""
Validation gate for question sets.
"""

from .question_validator import (
    QuestionValidator,
    QuestionValidation,
    ValidationReport,
    validate,
)

__all__ = ["QuestionValidator", "QuestionValidation", "ValidationReport", "validate"]
