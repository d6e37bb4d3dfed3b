"""
Core base interfaces for the Trivia Grid generator.

This package contains the puzzle and validator base classes, the concrete
3×3 grid and the pipeline exceptions.

Classes:
    BasePuzzle: Abstract base class for all puzzle types
    BaseValidator: Abstract base class for question validators
    TriviaGridPuzzle: Concrete 3×3 grid implementation
    GridHeader: Row/column header (value + dimension)
    GridCell: One grid intersection with its answers
"""

from .base_puzzle import BasePuzzle, TriviaGridPuzzle, GridHeader, GridCell, GRID_SIZE
from .base_validator import BaseValidator
from .exceptions import TriviaGridError, InsufficientDataError, GenerationExhaustedError

__all__ = [
    'BasePuzzle',
    'BaseValidator',
    'TriviaGridPuzzle',
    'GridHeader',
    'GridCell',
    'GRID_SIZE',
    'TriviaGridError',
    'InsufficientDataError',
    'GenerationExhaustedError',
]
