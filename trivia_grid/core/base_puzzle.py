"""
Minimal base puzzle interface and the 3×3 trivia grid.

This module provides the essential interface that puzzle types implement and the
concrete grid produced by the assembler.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, NamedTuple, Optional, Tuple
from dataclasses import dataclass, field

from ..data.data_structure import FeatureDimension

GRID_SIZE = 3


@dataclass
class BasePuzzle(ABC):
    """
    Base class for all puzzle types.

    Provides the minimal interface needed for validation and serialization.
    """

    puzzle_id: str
    size: Tuple[int, int]

    @abstractmethod
    def get_size(self) -> Tuple[int, int]:
        """Return puzzle dimensions."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert puzzle to dictionary for serialization."""
        pass


class GridHeader(NamedTuple):
    """A row or column header: a concrete value within a dimension."""

    value: str
    dimension: FeatureDimension

    def to_dict(self) -> Dict[str, str]:
        return {"feature": self.value, "featureType": self.dimension.value}


@dataclass
class GridCell:
    """
    One intersection of the grid.

    Attributes:
        row: Row index (0-based)
        col: Column index (0-based)
        correct_answers: Entity names satisfying both headers (empty if invalid)
        difficulty: "easy", "medium" or "hard"
        question_type: "standard" or "team-pair"
        failure_reason: Why the cell is invalid, None for valid cells
    """

    row: int
    col: int
    correct_answers: List[str] = field(default_factory=list)
    difficulty: str = "hard"
    question_type: str = "standard"
    failure_reason: Optional[str] = None

    @property
    def answer_count(self) -> int:
        return len(self.correct_answers)

    @property
    def is_valid(self) -> bool:
        return self.failure_reason is None and bool(self.correct_answers)


class TriviaGridPuzzle(BasePuzzle):
    """
    Assembled 3×3 trivia grid.

    Row and column headers need not share a dimension; every row/column
    pairing has already been checked against the degenerate-pairing rule.

    Attributes:
        puzzle_id: Unique identifier for the grid
        size: Always (3, 3)
        row_headers: Three GridHeader objects
        col_headers: Three GridHeader objects
        cells: 3×3 list of GridCell objects, row-major
        source: "random", "fallback" or "template"
    """

    def __init__(
        self,
        puzzle_id: str,
        row_headers: List[GridHeader],
        col_headers: List[GridHeader],
        cells: List[List[GridCell]],
        source: str = "random",
    ):
        """
        Initialize a trivia grid.

        Raises:
            ValueError: If headers or cells do not form a 3×3 grid
        """
        super().__init__(puzzle_id, (GRID_SIZE, GRID_SIZE))

        if len(row_headers) != GRID_SIZE or len(col_headers) != GRID_SIZE:
            raise ValueError(
                f"Grid {puzzle_id} needs {GRID_SIZE} row and {GRID_SIZE} column headers"
            )
        if len(cells) != GRID_SIZE or any(len(row) != GRID_SIZE for row in cells):
            raise ValueError(f"Grid {puzzle_id} must have {GRID_SIZE}x{GRID_SIZE} cells")

        self.row_headers = list(row_headers)
        self.col_headers = list(col_headers)
        self.cells = cells
        self.source = source

    def get_size(self) -> Tuple[int, int]:
        return self.size

    def get_cell(self, row: int, col: int) -> GridCell:
        return self.cells[row][col]

    def iter_cells(self):
        """Yield cells in row-major order."""
        for row in self.cells:
            yield from row

    @property
    def valid_cell_count(self) -> int:
        return sum(1 for cell in self.iter_cells() if cell.is_valid)

    @property
    def header_values(self) -> List[str]:
        return [header.value for header in self.row_headers + self.col_headers]

    def cell_signature(self) -> Tuple[Tuple[str, str, str, str], ...]:
        """Identity of the valid cells, used to tell two grids apart."""
        signature = []
        for cell in self.iter_cells():
            if not cell.is_valid:
                continue
            row_header = self.row_headers[cell.row]
            col_header = self.col_headers[cell.col]
            signature.append(
                (
                    row_header.value,
                    row_header.dimension.value,
                    col_header.value,
                    col_header.dimension.value,
                )
            )
        return tuple(signature)

    def failed_cells(self) -> List[Dict[str, Any]]:
        """Diagnostics for every invalid cell."""
        failures = []
        for cell in self.iter_cells():
            if cell.is_valid:
                continue
            failures.append(
                {
                    "cellPosition": {"row": cell.row, "col": cell.col},
                    "rowFeature": self.row_headers[cell.row].value,
                    "colFeature": self.col_headers[cell.col].value,
                    "reason": cell.failure_reason or "no answers",
                }
            )
        return failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "puzzle_id": self.puzzle_id,
            "size": self.size,
            "source": self.source,
            "rowHeaders": [header.value for header in self.row_headers],
            "rowHeaderTypes": [header.dimension.value for header in self.row_headers],
            "colHeaders": [header.value for header in self.col_headers],
            "colHeaderTypes": [header.dimension.value for header in self.col_headers],
            "validCells": self.valid_cell_count,
            "grid": [
                [
                    {
                        "correctAnswers": list(cell.correct_answers),
                        "answerCount": cell.answer_count,
                        "difficulty": cell.difficulty,
                    }
                    for cell in row
                ]
                for row in self.cells
            ],
        }
