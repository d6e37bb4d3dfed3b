"""
Trivia Grid Generation Module

This module turns an entity pool into playable 3×3 trivia grids.

Architecture:
- feature_extractor: Deduplicated team/role/nationality values from the pool
- combination_index: One-off pre-computation of every valid header pair
- grid_assembler: Randomized, bounded grid assembly with fallback templates
- question_entry: QuestionRecord dataclass for API output and storage
- game_builder: Orchestrator for loading, assembly, validation and persistence

Key Features:
- numpy membership masks for whole-dimension pair counting
- Team exclusion and priority rules from configuration
- Acceptance at 7+ valid cells, 9/9 short-circuits the attempt loop
"""

from .feature_extractor import FeatureExtractor, ExtractedFeatures
from .combination_index import (
    CombinationCandidate,
    CombinationIndex,
    CombinationPrecomputer,
    calculate_difficulty,
    calculate_score,
)
from .grid_assembler import GridAssembler
from .question_entry import QuestionRecord
from .game_builder import GameBuilder, GameCreationResult, CombinationIndexCache


__all__ = [
    "FeatureExtractor",
    "ExtractedFeatures",
    "CombinationCandidate",
    "CombinationIndex",
    "CombinationPrecomputer",
    "calculate_difficulty",
    "calculate_score",
    "GridAssembler",
    "QuestionRecord",
    "GameBuilder",
    "GameCreationResult",
    "CombinationIndexCache",
]
