"""
Minimal base validator interface for question sets.

This module provides the essential validator contract without unnecessary complexity.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any


class BaseValidator(ABC):
    """
    Base class for question validators.

    Validators are pure: they report on their input and never modify it.
    """

    @abstractmethod
    def validate_single(self, question, question_number: int) -> Dict[str, Any]:
        """
        Validate a single question.

        Args:
            question: Question record or API dict carrying its answers
            question_number: Fallback number when the question carries none

        Returns:
            Dict with per-question counts, issues and the minimum-answer verdict
        """
        pass

    @abstractmethod
    def validate_batch(self, questions: List) -> Any:
        """
        Validate a list of questions.

        Args:
            questions: Question records or API dicts

        Returns:
            Report with overall verdict, summary and per-question details
        """
        pass
