"""
Validation Gate for question sets.

Checks that every question of a game has enough distinct, non-empty answers
before the game is created. Works on assembled grids and on externally
supplied question lists alike.

Per-question counts:
- total: raw answer entries
- valid: non-null entries that are non-empty after trimming
- unique: valid entries after lower-casing, deduplicated

The gate is pure: it never repairs, reorders or mutates its input, and the
same input always yields the same report.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..core.base_validator import BaseValidator
from ..utils.config_loader import get_config
from ..utils.unicode_utils import is_blank, normalize_answer

logger = logging.getLogger(__name__)


@dataclass
class QuestionValidation:
    """Validation outcome for one question."""

    question_number: int
    row_feature: Optional[str]
    col_feature: Optional[str]
    total_answers: int
    valid_answers: int
    unique_answers: int
    meets_minimum: bool
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionNumber": self.question_number,
            "rowFeature": self.row_feature,
            "colFeature": self.col_feature,
            "totalAnswers": self.total_answers,
            "validAnswers": self.valid_answers,
            "uniqueAnswers": self.unique_answers,
            "meetsMinimum": self.meets_minimum,
            "issues": list(self.issues),
        }


@dataclass
class ValidationReport:
    """Validation outcome for a question set."""

    is_valid: bool
    minimum_required: int
    details: List[QuestionValidation] = field(default_factory=list)

    @property
    def total_questions(self) -> int:
        return len(self.details)

    @property
    def valid_questions(self) -> int:
        return sum(1 for detail in self.details if detail.meets_minimum)

    @property
    def invalid_questions(self) -> int:
        return self.total_questions - self.valid_questions

    @property
    def message(self) -> str:
        if self.is_valid:
            return f"All {self.total_questions} questions are valid"
        return (
            f"{self.invalid_questions} questions have fewer than "
            f"{self.minimum_required} answers"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "summary": {
                "totalQuestions": self.total_questions,
                "validQuestions": self.valid_questions,
                "invalidQuestions": self.invalid_questions,
                "minimumRequired": self.minimum_required,
                "canCreateGame": self.is_valid,
            },
            "details": [detail.to_dict() for detail in self.details],
            "message": self.message,
        }


def _question_field(question, attribute: str, key: str):
    if isinstance(question, dict):
        return question.get(key)
    return getattr(question, attribute, None)


def _question_answers(question) -> List[Any]:
    if isinstance(question, dict):
        answers = question.get("correctAnswers")
        if answers is None:
            answers = question.get("answers")
    else:
        answers = getattr(question, "correct_answers", None)
    return list(answers) if isinstance(answers, (list, tuple)) else []


class QuestionValidator(BaseValidator):
    """
    Minimum-answer validator.

    Accepts API dicts (``correctAnswers`` or ``answers``) or QuestionRecord
    objects.
    """

    def __init__(self, minimum_required: int = None):
        """
        Initialize validator.

        Args:
            minimum_required: Unique answers each question needs (default from config)
        """
        if minimum_required is None:
            minimum_required = get_config().get_int("MINIMUM_ANSWERS_REQUIRED", 3)
        self.minimum_required = minimum_required

    def validate_single(self, question, question_number: int) -> Dict[str, Any]:
        return self._check_question(question, question_number).to_dict()

    def validate_batch(self, questions: Sequence) -> ValidationReport:
        """
        Validate a question set.

        Args:
            questions: Question records or API dicts

        Returns:
            ValidationReport; is_valid is True only if every question meets the minimum
        """
        details = [
            self._check_question(question, position + 1)
            for position, question in enumerate(questions)
        ]
        report = ValidationReport(
            is_valid=all(detail.meets_minimum for detail in details),
            minimum_required=self.minimum_required,
            details=details,
        )

        if report.is_valid:
            logger.info(f"✅ Validation passed: {report.total_questions} questions")
        else:
            logger.warning(
                f"❌ Validation failed: {report.invalid_questions}/{report.total_questions} "
                f"questions below {self.minimum_required} answers"
            )
        return report

    def _check_question(self, question, position: int) -> QuestionValidation:
        answers = _question_answers(question)
        total = len(answers)

        valid = [answer for answer in answers if not is_blank(answer)]
        unique = {normalize_answer(str(answer)) for answer in valid}

        empty_count = total - len(valid)
        duplicate_count = len(valid) - len(unique)

        issues = []
        if total < self.minimum_required:
            issues.append(f"Only {total} answers (need {self.minimum_required})")
        if empty_count:
            issues.append(f"{empty_count} empty answers")
        if duplicate_count:
            issues.append(f"{duplicate_count} duplicate answers")

        return QuestionValidation(
            question_number=_question_field(question, "question_number", "questionNumber")
            or position,
            row_feature=_question_field(question, "row_feature", "rowFeature"),
            col_feature=_question_field(question, "col_feature", "colFeature"),
            total_answers=total,
            valid_answers=len(valid),
            unique_answers=len(unique),
            meets_minimum=len(unique) >= self.minimum_required,
            issues=issues,
        )


def validate(questions: Sequence, minimum_required: int = None) -> ValidationReport:
    """Validate a question set with a fresh QuestionValidator."""
    return QuestionValidator(minimum_required).validate_batch(questions)
