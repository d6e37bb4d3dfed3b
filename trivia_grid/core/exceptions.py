"""
Exceptions raised by the grid generation pipeline.

Validation problems are not exceptions: the validation gate always returns a
structured report.
"""

from typing import Any, Dict, List, Optional


class TriviaGridError(Exception):
    """Base class for grid generation errors."""


class InsufficientDataError(TriviaGridError):
    """The entity pool supports no combination above the minimum-answer threshold."""

    def __init__(self, message: str, entity_count: int = 0):
        super().__init__(message)
        self.entity_count = entity_count


class GenerationExhaustedError(TriviaGridError):
    """
    Attempts and fallback templates ran out before reaching the acceptance threshold.

    Attributes:
        attempts: Number of random attempts made
        best_valid_cells: Highest valid-cell count seen in any attempt
        required_valid_cells: Acceptance threshold that was not reached
        failed_cells: Diagnostics for the invalid cells of the best grid
    """

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        best_valid_cells: int = 0,
        required_valid_cells: int = 0,
        failed_cells: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.best_valid_cells = best_valid_cells
        self.required_valid_cells = required_valid_cells
        self.failed_cells = failed_cells or []
