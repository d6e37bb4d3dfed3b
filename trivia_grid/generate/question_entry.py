"""
QuestionRecord format for API output and game storage.

This module defines the serialized form of one grid cell, as sent to clients and
as stored with a game. It differs from the GridCell class used during assembly.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any
import json
import logging

from ..data.data_structure import FeatureDimension

logger = logging.getLogger(__name__)

FEATURE_TYPES = {dimension.value for dimension in FeatureDimension}


@dataclass
class QuestionRecord:
    """
    One playable question of a grid.

    Attributes:
        question_number: 1-based sequential number (row-major over valid cells)
        row_feature: Row header value (e.g., "Barcelona")
        row_feature_type: "team", "role" or "nationality"
        col_feature: Column header value
        col_feature_type: "team", "role" or "nationality"
        correct_answers: Every entity name satisfying both headers
        cell_position: {"row": r, "col": c}, 0-based
        difficulty: "easy", "medium" or "hard"
        question_type: "standard" or "team-pair"
    """

    question_number: int
    row_feature: str
    row_feature_type: str
    col_feature: str
    col_feature_type: str
    correct_answers: List[str]
    cell_position: Dict[str, int]
    difficulty: str = "hard"
    question_type: str = "standard"
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        """Validate record after initialization."""
        if self.question_number < 1:
            raise ValueError("Question number must be positive")

        for feature_type in (self.row_feature_type, self.col_feature_type):
            if feature_type not in FEATURE_TYPES:
                raise ValueError(f"Unknown feature type: {feature_type}")

        row = self.cell_position.get("row")
        col = self.cell_position.get("col")
        if not (isinstance(row, int) and isinstance(col, int) and row >= 0 and col >= 0):
            raise ValueError(f"Invalid cell position: {self.cell_position}")

    @property
    def answer_count(self) -> int:
        return len(self.correct_answers)

    @classmethod
    def from_grid_puzzle(cls, puzzle) -> List["QuestionRecord"]:
        """
        Create records from an assembled TriviaGridPuzzle.

        Only valid cells become questions; invalid cells are not playable.

        Args:
            puzzle: TriviaGridPuzzle instance from the assembler

        Returns:
            List of QuestionRecord in row-major order
        """
        records = []
        question_number = 1

        for cell in puzzle.iter_cells():
            if not cell.is_valid:
                continue

            row_header = puzzle.row_headers[cell.row]
            col_header = puzzle.col_headers[cell.col]
            records.append(
                cls(
                    question_number=question_number,
                    row_feature=row_header.value,
                    row_feature_type=row_header.dimension.value,
                    col_feature=col_header.value,
                    col_feature_type=col_header.dimension.value,
                    correct_answers=list(cell.correct_answers),
                    cell_position={"row": cell.row, "col": cell.col},
                    difficulty=cell.difficulty,
                    question_type=cell.question_type,
                )
            )
            question_number += 1

        return records

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "QuestionRecord":
        """
        Build a record from an API payload.

        Args:
            data: Question dict in API (camelCase) format
            index: Position in the submitted list, used for missing numbers/positions
        """
        known = {
            "questionNumber",
            "rowFeature",
            "rowFeatureType",
            "colFeature",
            "colFeatureType",
            "correctAnswers",
            "cellPosition",
            "difficulty",
            "questionType",
            "answerCount",
        }
        answers = data.get("correctAnswers")
        return cls(
            question_number=data.get("questionNumber") or index + 1,
            row_feature=data.get("rowFeature", ""),
            row_feature_type=data.get("rowFeatureType", ""),
            col_feature=data.get("colFeature", ""),
            col_feature_type=data.get("colFeatureType", ""),
            correct_answers=list(answers) if isinstance(answers, list) else [],
            cell_position=data.get("cellPosition") or {"row": index, "col": 0},
            difficulty=data.get("difficulty", "hard"),
            question_type=data.get("questionType", "standard"),
            extra={key: value for key, value in data.items() if key not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API dictionary format."""
        data = dict(self.extra)
        data.update(
            {
                "questionNumber": self.question_number,
                "rowFeature": self.row_feature,
                "rowFeatureType": self.row_feature_type,
                "colFeature": self.col_feature,
                "colFeatureType": self.col_feature_type,
                "correctAnswers": list(self.correct_answers),
                "cellPosition": dict(self.cell_position),
                "difficulty": self.difficulty,
                "answerCount": self.answer_count,
                "questionType": self.question_type,
            }
        )
        return data

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
