"""
Grid Assembler

Draws 3×3 grids from a precomputed CombinationIndex. Each attempt picks a
dimension layout, samples three row headers and three column headers, resolves
the nine cells through the index and scores the grid by its valid-cell count.

Attempt loop:
1. Select headers (no value repeats across the six slots)
2. Resolve cells (absent or below-minimum pairs become invalid cells)
3. Stop immediately on 9/9; otherwise keep the best grid seen
4. After the attempt cap or deadline, accept the best grid if it reaches the
   valid-cell threshold, else try fallback templates
5. Raise GenerationExhaustedError with per-cell diagnostics
"""

import logging
import random
import time
from collections import Counter
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np

from ..core.base_puzzle import GRID_SIZE, GridCell, GridHeader, TriviaGridPuzzle
from ..core.exceptions import GenerationExhaustedError
from ..data.data_structure import FeatureDimension, is_valid_pairing
from ..utils.config_loader import get_config
from ..utils.team_filters import TeamFilter
from .combination_index import STANDARD, CombinationIndex
from .question_entry import QuestionRecord

logger = logging.getLogger(__name__)

TEAM = FeatureDimension.TEAM
ROLE = FeatureDimension.ROLE
NATIONALITY = FeatureDimension.NATIONALITY

Layout = Tuple[Tuple[FeatureDimension, ...], Tuple[FeatureDimension, ...]]

# Row dimensions never share a non-team dimension with column dimensions
STANDARD_LAYOUTS: Tuple[Layout, ...] = (
    ((TEAM, TEAM, TEAM), (ROLE, ROLE, NATIONALITY)),
    ((TEAM, TEAM, TEAM), (ROLE, NATIONALITY, NATIONALITY)),
    ((TEAM, TEAM, TEAM), (ROLE, ROLE, ROLE)),
    ((TEAM, TEAM, TEAM), (NATIONALITY, NATIONALITY, NATIONALITY)),
    ((TEAM, TEAM, ROLE), (NATIONALITY, NATIONALITY, NATIONALITY)),
    ((TEAM, TEAM, NATIONALITY), (ROLE, ROLE, ROLE)),
    ((TEAM, ROLE, ROLE), (NATIONALITY, NATIONALITY, NATIONALITY)),
    ((TEAM, NATIONALITY, NATIONALITY), (ROLE, ROLE, ROLE)),
)

TEAM_PAIR_LAYOUTS: Tuple[Layout, ...] = (
    ((TEAM, TEAM, ROLE), (TEAM, TEAM, NATIONALITY)),
    ((TEAM, TEAM, TEAM), (TEAM, TEAM, ROLE)),
)

FULL_GRID = GRID_SIZE * GRID_SIZE


def parse_template_header(entry: str) -> Optional[GridHeader]:
    """Parse a "dimension:value" template entry."""
    if ":" not in entry:
        return None
    dimension_name, value = entry.split(":", 1)
    try:
        dimension = FeatureDimension(dimension_name.strip().lower())
    except ValueError:
        return None
    value = value.strip()
    return GridHeader(value, dimension) if value else None


class GridAssembler:
    """
    Assembles trivia grids from a shared, read-only CombinationIndex.

    One assembler per request is cheap; the index is never modified.
    """

    def __init__(
        self,
        index: CombinationIndex,
        team_filter: TeamFilter = None,
        generation_config: Dict = None,
        fallback_templates: List[Dict[str, List[str]]] = None,
        seed: int = None,
    ):
        """
        Initialize the assembler.

        Args:
            index: Precomputed combinations for the current entity pool
            team_filter: Team priority rules used to bias header sampling
            generation_config: Overrides for get_generation_config() values
            fallback_templates: [{"rows": [...], "cols": [...]}] of "dimension:value"
                entries (default from config)
            seed: Seed for reproducible sampling
        """
        config = get_config()
        self.index = index
        self.team_filter = team_filter or TeamFilter()
        self.generation_config = config.get_generation_config()
        if generation_config:
            self.generation_config.update(generation_config)
        if fallback_templates is None:
            fallback_templates = config.get_fallback_templates()
        self.fallback_templates = fallback_templates

        self.min_answers = self.generation_config["min_answers_required"]
        self.min_valid_cells = self.generation_config["min_valid_cells"]
        self.max_attempts = max(1, self.generation_config["max_generation_attempts"])
        self.timeout_seconds = self.generation_config["generation_timeout_seconds"]
        self.fresh_attempts = max(1, self.generation_config["fresh_regeneration_attempts"])

        self._rng = random.Random(seed)
        self._np_rng = np.random.default_rng(seed)

        self.layouts = STANDARD_LAYOUTS
        if self.index.allow_team_pairs:
            self.layouts = STANDARD_LAYOUTS + TEAM_PAIR_LAYOUTS

    def can_generate(self, count: int = FULL_GRID) -> bool:
        """Cheap precheck: are there at least `count` candidates that could fill a valid cell?"""
        usable = sum(
            1 for candidate in self.index.candidates if candidate.answer_count >= self.min_answers
        )
        return usable >= count

    def assemble(self) -> TriviaGridPuzzle:
        """
        Assemble one grid.

        Returns:
            TriviaGridPuzzle with at least min_valid_cells valid cells

        Raises:
            GenerationExhaustedError: If neither random attempts nor fallback
                templates reach the acceptance threshold
        """
        logger.info("🎯 Generating 3x3 grid...")

        best: Optional[TriviaGridPuzzle] = None
        attempts = 0

        if self.index.is_empty:
            logger.warning("Combination index is empty - nothing to assemble")
        else:
            deadline = time.monotonic() + self.timeout_seconds
            for attempt in range(self.max_attempts):
                if attempt and time.monotonic() > deadline:
                    logger.warning(
                        f"Grid generation deadline reached after {attempt} attempts"
                    )
                    break
                attempts += 1

                headers = self._select_headers()
                if headers is None:
                    continue

                grid = self._build_grid(headers[0], headers[1], source="random")
                if best is None or grid.valid_cell_count > best.valid_cell_count:
                    best = grid

                if grid.valid_cell_count == FULL_GRID:
                    logger.info(
                        f"✅ Generated complete 3x3 grid on attempt {attempt + 1}"
                    )
                    return grid

                logger.debug(
                    f"Attempt {attempt + 1}: {grid.valid_cell_count}/{FULL_GRID} valid cells"
                )

        if best is not None and best.valid_cell_count >= self.min_valid_cells:
            logger.info(
                f"✅ Accepted grid with {best.valid_cell_count}/{FULL_GRID} valid cells "
                f"after {attempts} attempts"
            )
            return best

        logger.info("⚠️ Using fallback grid generation...")
        for grid in self._fallback_grids():
            if best is None or grid.valid_cell_count > best.valid_cell_count:
                best = grid
            if grid.valid_cell_count >= self.min_valid_cells:
                logger.info(
                    f"✅ Fallback template produced {grid.valid_cell_count}/{FULL_GRID} valid cells"
                )
                return grid

        best_valid = best.valid_cell_count if best is not None else 0
        failed_cells = best.failed_cells() if best is not None else []
        logger.error(
            f"❌ Grid generation exhausted: best {best_valid}/{FULL_GRID} valid cells "
            f"(need {self.min_valid_cells}) after {attempts} attempts"
        )
        raise GenerationExhaustedError(
            f"Could not assemble a grid with {self.min_valid_cells}+ valid cells "
            f"(best {best_valid}/{FULL_GRID} after {attempts} attempts)",
            attempts=attempts,
            best_valid_cells=best_valid,
            required_valid_cells=self.min_valid_cells,
            failed_cells=failed_cells,
        )

    def generate_fresh(self, previous: TriviaGridPuzzle = None) -> TriviaGridPuzzle:
        """
        Assemble a new grid that differs from `previous`.

        If the pool only supports grids identical to `previous`, the last
        assembled grid is returned with a warning.
        """
        grid = self.assemble()
        if previous is None:
            return grid

        previous_signature = previous.cell_signature()
        for _ in range(self.fresh_attempts - 1):
            if grid.cell_signature() != previous_signature:
                return grid
            grid = self.assemble()

        if grid.cell_signature() == previous_signature:
            logger.warning("Fresh regeneration produced the same cells as the previous grid")
        return grid

    def generate_questions(self, count: int = FULL_GRID) -> List[QuestionRecord]:
        """Assemble a grid and return up to `count` question records."""
        grid = self.assemble()
        return QuestionRecord.from_grid_puzzle(grid)[:count]

    # ---- header selection ----

    def _usable_layouts(self) -> List[Layout]:
        usable = []
        for rows, cols in self.layouts:
            needed = Counter(rows + cols)
            if all(
                len(self.index.participating_values(dimension)) >= count
                for dimension, count in needed.items()
            ):
                usable.append((rows, cols))
        return usable

    def _select_headers(self) -> Optional[Tuple[List[GridHeader], List[GridHeader]]]:
        layouts = self._usable_layouts()
        if not layouts:
            logger.debug("No header layout fits the available feature values")
            return None

        row_dimensions, col_dimensions = self._rng.choice(layouts)
        if self._rng.random() < 0.5:
            row_dimensions, col_dimensions = col_dimensions, row_dimensions
        row_dimensions = list(row_dimensions)
        col_dimensions = list(col_dimensions)
        self._rng.shuffle(row_dimensions)
        self._rng.shuffle(col_dimensions)

        used: Set[str] = set()
        rows = self._select_row_headers(row_dimensions, used)
        if rows is None:
            return None
        cols = self._select_col_headers(col_dimensions, rows, used)
        if cols is None:
            return None
        return rows, cols

    def _available(self, dimension: FeatureDimension, used: Set[str]) -> List[str]:
        return [
            value
            for value in self.index.participating_values(dimension)
            if value not in used
        ]

    def _select_row_headers(
        self, dimensions: Sequence[FeatureDimension], used: Set[str]
    ) -> Optional[List[GridHeader]]:
        headers = []
        first_team = True

        for dimension in dimensions:
            pool = self._available(dimension, used)
            if not pool:
                return None

            if dimension is TEAM:
                value = self._pick_team(pool, preferred_only=first_team)
                first_team = False
            else:
                value = self._rng.choice(pool)

            used.add(value)
            headers.append(GridHeader(value, dimension))

        return headers

    def _pick_team(self, pool: List[str], preferred_only: bool) -> str:
        """Priority-weighted team sampling; the first team slot goes to a preferred team when possible."""
        if preferred_only:
            preferred = [team for team in pool if self.team_filter.is_preferred(team)]
            if preferred:
                return self._rng.choice(preferred)

        weights = np.array(
            [max(self.team_filter.priority_score(team), 1) for team in pool], dtype=float
        )
        probabilities = weights / weights.sum()
        return pool[int(self._np_rng.choice(len(pool), p=probabilities))]

    def _select_col_headers(
        self,
        dimensions: Sequence[FeatureDimension],
        rows: List[GridHeader],
        used: Set[str],
    ) -> Optional[List[GridHeader]]:
        headers = []

        for dimension in dimensions:
            pool = self._available(dimension, used)
            if not pool:
                return None
            self._rng.shuffle(pool)

            best_value, best_hits = pool[0], -1
            for value in pool:
                header = GridHeader(value, dimension)
                hits = sum(1 for row in rows if self._is_playable(row, header))
                if hits > best_hits:
                    best_value, best_hits = value, hits
                if hits == len(rows):
                    break

            used.add(best_value)
            headers.append(GridHeader(best_value, dimension))

        return headers

    # ---- cell resolution ----

    def _is_playable(self, row: GridHeader, col: GridHeader) -> bool:
        if not is_valid_pairing(row.dimension, col.dimension, self.index.allow_team_pairs):
            return False
        candidate = self.index.lookup(row, col)
        return candidate is not None and candidate.answer_count >= self.min_answers

    def _resolve_cell(self, row_index: int, col_index: int, row: GridHeader, col: GridHeader) -> GridCell:
        if not is_valid_pairing(row.dimension, col.dimension, self.index.allow_team_pairs):
            return GridCell(
                row=row_index,
                col=col_index,
                failure_reason=f"{row.dimension.value}×{col.dimension.value} pairing is not allowed",
            )

        candidate = self.index.lookup(row, col)
        if candidate is None:
            return GridCell(
                row=row_index, col=col_index, failure_reason="no precomputed combination"
            )
        if candidate.answer_count < self.min_answers:
            return GridCell(
                row=row_index,
                col=col_index,
                question_type=candidate.question_type,
                failure_reason=(
                    f"only {candidate.answer_count} answers (need {self.min_answers})"
                ),
            )

        return GridCell(
            row=row_index,
            col=col_index,
            correct_answers=list(candidate.possible_answers),
            difficulty=candidate.difficulty,
            question_type=candidate.question_type,
        )

    def _build_grid(
        self, rows: List[GridHeader], cols: List[GridHeader], source: str
    ) -> TriviaGridPuzzle:
        cells = [
            [self._resolve_cell(r, c, rows[r], cols[c]) for c in range(GRID_SIZE)]
            for r in range(GRID_SIZE)
        ]
        return TriviaGridPuzzle(
            puzzle_id=f"grid_{self._rng.getrandbits(48):012x}",
            row_headers=rows,
            col_headers=cols,
            cells=cells,
            source=source,
        )

    # ---- fallbacks ----

    def _headers_are_usable(self, rows: List[GridHeader], cols: List[GridHeader]) -> bool:
        headers = rows + cols
        if len(rows) != GRID_SIZE or len(cols) != GRID_SIZE:
            return False
        if len({header.value for header in headers}) != len(headers):
            return False
        if any(
            header.dimension is TEAM and self.team_filter.is_excluded(header.value)
            for header in headers
        ):
            return False
        return all(
            is_valid_pairing(row.dimension, col.dimension, self.index.allow_team_pairs)
            for row in rows
            for col in cols
        )

    def _fallback_grids(self) -> Iterator[TriviaGridPuzzle]:
        """Hand-authored templates first, then one derived from the densest candidates."""
        for template in self.fallback_templates:
            rows = [parse_template_header(entry) for entry in template.get("rows", [])]
            cols = [parse_template_header(entry) for entry in template.get("cols", [])]
            if None in rows or None in cols or not self._headers_are_usable(rows, cols):
                logger.debug(f"Skipping unusable fallback template: {template}")
                continue
            yield self._build_grid(rows, cols, source="template")

        derived = self._derive_dense_template()
        if derived is not None:
            yield self._build_grid(derived[0], derived[1], source="fallback")

    def _derive_dense_template(self) -> Optional[Tuple[List[GridHeader], List[GridHeader]]]:
        """Top three teams by candidate count crossed with the roles/nationalities they share most."""
        team_counts: Counter = Counter()
        for candidate in self.index.candidates:
            if candidate.question_type != STANDARD:
                continue
            if candidate.row_dimension is TEAM:
                team_counts[candidate.row_feature] += 1

        if len(team_counts) < GRID_SIZE:
            return None

        rows = [GridHeader(team, TEAM) for team, _ in team_counts.most_common(GRID_SIZE)]

        column_options = []
        for dimension in (ROLE, NATIONALITY):
            for value in self.index.participating_values(dimension):
                header = GridHeader(value, dimension)
                hits = sum(1 for row in rows if self._is_playable(row, header))
                if hits:
                    column_options.append((hits, header))

        if len(column_options) < GRID_SIZE:
            return None

        # stable sort keeps participating order among ties
        column_options.sort(key=lambda option: option[0], reverse=True)
        cols = [header for _, header in column_options[:GRID_SIZE]]

        if not self._headers_are_usable(rows, cols):
            return None
        return rows, cols
