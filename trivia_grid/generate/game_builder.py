"""
Game Builder - Main Orchestrator for Trivia Grid Game Creation

This module coordinates the complete game creation pipeline from entity pool
loading to a validated, persisted game.

Pipeline:
1. Load entity pool (JSON file, in-memory records or HuggingFace dataset)
2. Pre-compute combinations once per pool (CombinationIndexCache)
3. Assemble a grid per request, or accept externally supplied questions
4. Run the validation gate
5. Persist the game (best-effort)
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import InsufficientDataError
from ..data.data_structure import Entity
from ..data.entity_loader import EntityLoader
from ..data.game_store import LocalGameStore
from ..utils.config_loader import get_config
from ..utils.team_filters import TeamFilter
from ..validate.question_validator import QuestionValidator, ValidationReport
from .combination_index import CombinationIndex, CombinationPrecomputer
from .grid_assembler import GridAssembler
from .question_entry import QuestionRecord

logger = logging.getLogger(__name__)


class CombinationIndexCache:
    """
    Holds the current CombinationIndex for an entity pool.

    A rebuild computes the new index outside the lock and swaps it in, so
    readers always get a complete snapshot. Every rebuild is issued its own
    generation number when it starts; the most recently started rebuild wins,
    whatever order the builds finish in.
    """

    def __init__(self, precomputer: CombinationPrecomputer):
        self.precomputer = precomputer
        self._lock = threading.Lock()
        self._index: Optional[CombinationIndex] = None
        self._generation = 0
        self._issued_generation = 0

    @property
    def generation(self) -> int:
        """Generation of the installed index (0 before the first rebuild)."""
        with self._lock:
            return self._generation

    def rebuild(self, entities: Sequence[Entity]) -> CombinationIndex:
        """
        Precompute a new index for `entities` and make it current.

        Returns:
            The index built from `entities`, even if a newer rebuild has
            already been installed
        """
        with self._lock:
            self._issued_generation += 1
            generation = self._issued_generation

        index = self.precomputer.build_index(entities, generation=generation)

        with self._lock:
            if generation > self._generation:
                self._index = index
                self._generation = generation
            else:
                logger.info(
                    f"Index generation {generation} superseded by {self._generation}, not installed"
                )
        return index

    def get(self) -> Optional[CombinationIndex]:
        """Current index snapshot, or None if nothing has been built yet."""
        with self._lock:
            return self._index

    def clear(self):
        with self._lock:
            self._index = None


@dataclass
class GameCreationResult:
    """Outcome of one create_game call."""

    game_id: str
    questions: List[QuestionRecord]
    validation: ValidationReport
    accepted: bool
    persisted: bool = False
    grid: Optional[Dict[str, Any]] = field(default=None, repr=False)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "questions": [question.to_dict() for question in self.questions],
            "validation": self.validation.to_dict(),
            "accepted": self.accepted,
            "persisted": self.persisted,
            "grid": self.grid,
            "error": self.error,
        }


class GameBuilder:
    """
    Main orchestrator for trivia grid game creation.

    Handles the complete workflow:
    1. Load the entity pool and pre-compute combinations
    2. Assemble a grid (or take supplied questions)
    3. Validate questions against the minimum-answer threshold
    4. Persist the game through the local game store
    """

    def __init__(
        self,
        team_filter: TeamFilter = None,
        game_store: LocalGameStore = None,
        generation_config: Dict = None,
        hf_token: str = None,
        seed: int = None,
    ):
        """
        Initialize game builder.

        Args:
            team_filter: Team exclusion/priority rules (default from config)
            game_store: Persistence collaborator; None disables persistence
            generation_config: Overrides for get_generation_config() values
            hf_token: HuggingFace token for dataset loading
            seed: Seed for reproducible grid assembly
        """
        self.config = get_config()
        self.hf_token = hf_token or self.config.get_string("DEFAULT_HF_TOKEN", "")
        self.team_filter = team_filter or TeamFilter()
        self.generation_config = generation_config or {}
        self.game_store = game_store
        self.seed = seed

        self.entity_loader = EntityLoader(hf_token=self.hf_token)
        self.index_cache = CombinationIndexCache(
            CombinationPrecomputer(self.team_filter, self.generation_config)
        )
        self.validator = QuestionValidator(
            self.generation_config.get("min_answers_required")
        )

        # Generation statistics
        self.generation_stats = {
            "total_attempts": 0,
            "successful_generations": 0,
            "failed_generations": 0,
            "rejected_games": 0,
            "persist_failures": 0,
            "avg_valid_cells": 0.0,
            "source_distribution": {},
        }

        logger.info("Initialized GameBuilder")

    def load_entities(self, entities: Sequence[Entity]) -> CombinationIndex:
        """Install a new entity pool and pre-compute its combinations."""
        logger.info(f"Loading entity pool with {len(entities)} entities")
        return self.index_cache.rebuild(entities)

    def load_entity_file(self, path: str) -> CombinationIndex:
        return self.load_entities(self.entity_loader.load_json(path))

    def load_hub_dataset(
        self, repo_id: str, config_name: str = None, split: str = "train"
    ) -> CombinationIndex:
        return self.load_entities(
            self.entity_loader.load_hub_dataset(repo_id, config_name, split)
        )

    def create_assembler(self) -> GridAssembler:
        """
        Build an assembler over the current index snapshot.

        Raises:
            InsufficientDataError: If no pool is loaded or it yields no combinations
        """
        index = self.index_cache.get()
        if index is None or index.is_empty:
            entity_count = index.entity_count if index is not None else 0
            raise InsufficientDataError(
                f"No valid combinations available ({entity_count} entities loaded)",
                entity_count=entity_count,
            )
        return GridAssembler(
            index,
            team_filter=self.team_filter,
            generation_config=self.generation_config,
            seed=self.seed,
        )

    def create_game(
        self,
        game_mode: str,
        session_id: str,
        questions: List[Dict[str, Any]] = None,
        player2_id: str = None,
    ) -> GameCreationResult:
        """
        Create a game from a fresh grid or from supplied questions.

        Args:
            game_mode: Game mode label (e.g., "single", "multiplayer")
            session_id: Creating session identifier
            questions: Externally supplied questions in API format; None to assemble
            player2_id: Optional second player for multiplayer games

        Returns:
            GameCreationResult; accepted is False when validation fails or a
            supplied question is malformed (see error)

        Raises:
            InsufficientDataError: If questions must be assembled and the pool is empty
            GenerationExhaustedError: If no grid reaches the valid-cell threshold
        """
        game_id = self._generate_game_id(game_mode, session_id)
        grid = None

        if questions is None:
            self.generation_stats["total_attempts"] += 1
            assembler = self.create_assembler()
            try:
                puzzle = assembler.assemble()
            except Exception:
                self.generation_stats["failed_generations"] += 1
                raise
            self.generation_stats["successful_generations"] += 1
            self._update_generation_stats(puzzle.valid_cell_count, puzzle.source)
            grid = puzzle.to_dict()
            records = QuestionRecord.from_grid_puzzle(puzzle)
            validation = self.validator.validate_batch(records)
        else:
            validation = self.validator.validate_batch(questions)
            records = []
            if validation.is_valid:
                try:
                    records = [
                        QuestionRecord.from_dict(question, position)
                        for position, question in enumerate(questions)
                    ]
                except ValueError as e:
                    self.generation_stats["rejected_games"] += 1
                    logger.warning(f"❌ Game {game_id} rejected: malformed question ({e})")
                    return GameCreationResult(
                        game_id=game_id,
                        questions=[],
                        validation=validation,
                        accepted=False,
                        error=str(e),
                    )

        if not validation.is_valid:
            self.generation_stats["rejected_games"] += 1
            logger.warning(f"❌ Game {game_id} rejected: {validation.message}")
            return GameCreationResult(
                game_id=game_id,
                questions=records,
                validation=validation,
                accepted=False,
                grid=grid,
            )

        persisted = self._persist_game(game_id, game_mode, session_id, player2_id, records)
        logger.info(f"✅ Created game {game_id} with {len(records)} questions")

        return GameCreationResult(
            game_id=game_id,
            questions=records,
            validation=validation,
            accepted=True,
            persisted=persisted,
            grid=grid,
        )

    def generate_questions(self, count: int = 9) -> List[QuestionRecord]:
        """Question records from a fresh grid over the current pool."""
        return self.create_assembler().generate_questions(count)

    def _generate_game_id(self, game_mode: str, session_id: str) -> str:
        """Generate unique game identifier."""
        return f"{game_mode}_{session_id}_{int(time.time() * 1000)}"

    def _persist_game(
        self,
        game_id: str,
        game_mode: str,
        session_id: str,
        player2_id: Optional[str],
        records: List[QuestionRecord],
    ) -> bool:
        if self.game_store is None:
            return False

        game = {
            "gameId": game_id,
            "gameMode": game_mode,
            "player1Id": session_id,
            "player2Id": player2_id,
            "status": "waiting" if player2_id is None and game_mode != "single" else "active",
            "createdAt": datetime.now().isoformat(),
        }

        try:
            self.game_store.save_game(
                game_id, game, [record.to_dict() for record in records]
            )
        except (OSError, ValueError, TypeError) as e:
            self.generation_stats["persist_failures"] += 1
            logger.error(f"❌ Failed to persist game {game_id}: {e}")
            return False
        return True

    def _update_generation_stats(self, valid_cells: int, source: str):
        """Update running generation statistics."""
        total_successful = self.generation_stats["successful_generations"]

        if total_successful == 1:
            self.generation_stats["avg_valid_cells"] = float(valid_cells)
        else:
            self.generation_stats["avg_valid_cells"] = (
                self.generation_stats["avg_valid_cells"] * (total_successful - 1)
                + valid_cells
            ) / total_successful

        distribution = self.generation_stats["source_distribution"]
        distribution[source] = distribution.get(source, 0) + 1

    def get_generation_statistics(self) -> Dict[str, Any]:
        """Get comprehensive generation statistics."""
        success_rate = (
            (
                self.generation_stats["successful_generations"]
                / self.generation_stats["total_attempts"]
            )
            if self.generation_stats["total_attempts"] > 0
            else 0.0
        )

        index = self.index_cache.get()
        return {
            "total_attempts": self.generation_stats["total_attempts"],
            "successful_generations": self.generation_stats["successful_generations"],
            "failed_generations": self.generation_stats["failed_generations"],
            "rejected_games": self.generation_stats["rejected_games"],
            "persist_failures": self.generation_stats["persist_failures"],
            "success_rate": f"{success_rate:.1%}",
            "average_valid_cells": f"{self.generation_stats['avg_valid_cells']:.1f}",
            "source_distribution": dict(self.generation_stats["source_distribution"]),
            "index": index.get_stats() if index is not None else None,
        }

    def export_candidates_csv(self, path: str) -> int:
        """
        Write the current candidate table to CSV.

        Returns:
            Number of candidate rows written

        Raises:
            InsufficientDataError: If no pool is loaded
        """
        index = self.index_cache.get()
        if index is None:
            raise InsufficientDataError("No entity pool loaded")

        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        frame = index.to_dataframe()
        frame.to_csv(output_path, index=False)

        logger.info(f"Exported {len(frame)} candidates to {output_path}")
        return len(frame)

    def clear_caches(self):
        """Drop the current index."""
        self.index_cache.clear()
        logger.info("Cleared GameBuilder caches")
