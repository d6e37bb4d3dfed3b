"""
Test suite for trivia_grid.validate module.
Tests answer counting, issue reporting, threshold boundaries and report format.
"""

import copy
from unittest.mock import MagicMock, patch

import pytest

from trivia_grid.generate.question_entry import QuestionRecord
from trivia_grid.validate.question_validator import QuestionValidator, validate


def make_question(number, answers, key="correctAnswers"):
    return {
        "questionNumber": number,
        "rowFeature": "Galatasaray",
        "colFeature": "Forvet",
        key: answers,
    }


@pytest.fixture
def questions():
    return [
        make_question(1, ["Hagi", "Hakan Şükür", "Arda"]),
        make_question(2, ["Messi", "messi ", "", "Ronaldo"]),
    ]


class TestQuestionValidator:
    """Test per-question answer checks."""

    def test_counts_and_issues(self, questions):
        """Empty answers are trimmed out and case-variants collapse."""
        report = validate(questions, minimum_required=3)
        detail = report.details[1]

        assert detail.question_number == 2
        assert detail.total_answers == 4
        assert detail.valid_answers == 3
        assert detail.unique_answers == 2
        assert detail.issues == ["1 empty answers", "1 duplicate answers"]
        assert not detail.meets_minimum

    def test_meets_minimum_depends_on_threshold(self, questions):
        report = validate(questions, minimum_required=2)

        assert report.details[1].meets_minimum
        assert report.is_valid

    def test_threshold_boundary(self):
        exact = validate([make_question(1, ["A", "B", "C"])], minimum_required=3)
        below = validate([make_question(1, ["A", "B"])], minimum_required=3)

        assert exact.is_valid
        assert exact.details[0].issues == []
        assert not below.is_valid
        assert below.details[0].issues == ["Only 2 answers (need 3)"]

    def test_duplicates_do_not_count_toward_minimum(self):
        report = validate([make_question(1, ["A", "a", " A "])], minimum_required=3)

        assert report.details[0].unique_answers == 1
        assert report.details[0].issues == ["2 duplicate answers"]
        assert not report.is_valid

    def test_null_and_non_string_answers_are_empty(self):
        report = validate([make_question(1, ["A", None, "B", 7, "C"])], minimum_required=3)
        detail = report.details[0]

        assert detail.valid_answers == 3
        assert detail.issues == ["2 empty answers"]
        assert detail.meets_minimum

    def test_answers_key_fallback(self):
        report = validate([make_question(1, ["A", "B", "C"], key="answers")], minimum_required=3)

        assert report.details[0].total_answers == 3
        assert report.is_valid

    def test_missing_answers(self):
        report = validate([{"rowFeature": "X", "colFeature": "Y"}], minimum_required=3)

        assert report.details[0].total_answers == 0
        assert report.details[0].question_number == 1
        assert report.details[0].issues == ["Only 0 answers (need 3)"]

    def test_question_records(self):
        record = QuestionRecord(
            question_number=4,
            row_feature="Beşiktaş",
            row_feature_type="team",
            col_feature="Türkiye",
            col_feature_type="nationality",
            correct_answers=["A", "B", "C"],
            cell_position={"row": 1, "col": 0},
        )

        report = validate([record], minimum_required=3)

        assert report.details[0].question_number == 4
        assert report.details[0].row_feature == "Beşiktaş"
        assert report.is_valid

    def test_validate_single(self):
        validator = QuestionValidator(minimum_required=3)

        result = validator.validate_single({"answers": ["A", "B"]}, 5)

        assert result["questionNumber"] == 5
        assert result["meetsMinimum"] is False

    @patch("trivia_grid.validate.question_validator.get_config")
    def test_minimum_from_config(self, mock_get_config):
        mock_config = MagicMock()
        mock_config.get_int.return_value = 10
        mock_get_config.return_value = mock_config

        validator = QuestionValidator()

        assert validator.minimum_required == 10
        mock_config.get_int.assert_called_once_with("MINIMUM_ANSWERS_REQUIRED", 3)


class TestValidationReport:
    """Test report semantics and serialization."""

    def test_purity(self, questions):
        """Input is never modified and repeated runs agree."""
        snapshot = copy.deepcopy(questions)

        first = validate(questions, minimum_required=3).to_dict()
        second = validate(questions, minimum_required=3).to_dict()

        assert questions == snapshot
        assert first == second

    def test_report_format(self, questions):
        data = validate(questions, minimum_required=3).to_dict()

        assert data["isValid"] is False
        assert data["summary"] == {
            "totalQuestions": 2,
            "validQuestions": 1,
            "invalidQuestions": 1,
            "minimumRequired": 3,
            "canCreateGame": False,
        }
        assert set(data["details"][0]) == {
            "questionNumber",
            "rowFeature",
            "colFeature",
            "totalAnswers",
            "validAnswers",
            "uniqueAnswers",
            "meetsMinimum",
            "issues",
        }
        assert data["message"] == "1 questions have fewer than 3 answers"

    def test_empty_question_list_is_valid(self):
        report = validate([], minimum_required=3)

        assert report.is_valid
        assert report.total_questions == 0
        assert report.to_dict()["message"] == "All 0 questions are valid"
