"""
Combination Precomputer

Computes, once per entity-pool load, every (row value, column value) pair whose
intersection is large enough to become a grid cell, and exposes the result as an
immutable CombinationIndex.

Approach:
- One boolean membership mask per feature value (numpy, one row per value)
- Pair counts for a whole dimension pair in a single matrix product
- Answer lists materialized only for pairs that pass the threshold
- Candidates scored, sorted by (team priority, score) and indexed in both
  orientations for O(1) cell resolution
"""

import dataclasses
import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..core.base_puzzle import GridHeader
from ..data.data_structure import Entity, FeatureDimension, feature_values, is_header_allowed
from ..utils.config_loader import get_config
from ..utils.team_filters import TeamFilter
from .feature_extractor import ExtractedFeatures, FeatureExtractor

logger = logging.getLogger(__name__)

STANDARD = "standard"
TEAM_PAIR = "team-pair"

EASY = "easy"
MEDIUM = "medium"
HARD = "hard"

LookupKey = Tuple[str, FeatureDimension, str, FeatureDimension]

# (row dimension, column dimension) pairs computed for standard candidates
STANDARD_DIMENSION_PAIRS = (
    (FeatureDimension.TEAM, FeatureDimension.ROLE),
    (FeatureDimension.TEAM, FeatureDimension.NATIONALITY),
    (FeatureDimension.ROLE, FeatureDimension.NATIONALITY),
)

PAIR_TYPE_BONUS = {
    frozenset((FeatureDimension.TEAM, FeatureDimension.ROLE)): 30,
    frozenset((FeatureDimension.TEAM, FeatureDimension.NATIONALITY)): 20,
    frozenset((FeatureDimension.ROLE, FeatureDimension.NATIONALITY)): 15,
    frozenset((FeatureDimension.TEAM,)): 50,
}

PREFERRED_TEAM_BONUS = 25
BOTH_PREFERRED_TEAM_PAIR_BONUS = 40


@dataclass(frozen=True)
class CombinationCandidate:
    """
    A precomputed intersection query and its answers.

    Attributes:
        row_feature: Row header value
        row_dimension: Row header dimension
        col_feature: Column header value
        col_dimension: Column header dimension
        possible_answers: Names of every entity matching both headers
        difficulty: "easy", "medium" or "hard"
        score: Ranking score (selection preference only)
        team_priority_score: Sum of team priority scores of team-typed sides
        question_type: "standard" or "team-pair"
    """

    row_feature: str
    row_dimension: FeatureDimension
    col_feature: str
    col_dimension: FeatureDimension
    possible_answers: Tuple[str, ...]
    difficulty: str
    score: int
    team_priority_score: int
    question_type: str = STANDARD

    @property
    def answer_count(self) -> int:
        return len(self.possible_answers)

    @property
    def key(self) -> LookupKey:
        return (self.row_feature, self.row_dimension, self.col_feature, self.col_dimension)

    def transposed(self) -> "CombinationCandidate":
        """Same candidate with row and column swapped."""
        return dataclasses.replace(
            self,
            row_feature=self.col_feature,
            row_dimension=self.col_dimension,
            col_feature=self.row_feature,
            col_dimension=self.row_dimension,
        )

    def to_dict(self) -> Dict:
        return {
            "rowFeature": self.row_feature,
            "rowFeatureType": self.row_dimension.value,
            "colFeature": self.col_feature,
            "colFeatureType": self.col_dimension.value,
            "possibleAnswers": list(self.possible_answers),
            "answerCount": self.answer_count,
            "difficulty": self.difficulty,
            "score": self.score,
            "teamPriorityScore": self.team_priority_score,
            "questionType": self.question_type,
        }


def calculate_difficulty(
    answer_count: int, question_type: str, preferred_min: int, preferred_max: int
) -> str:
    """
    Difficulty tier from the answer count.

    Team pairs are judged on their own, lower scale because two rosters rarely
    overlap much.
    """
    if question_type == TEAM_PAIR:
        if answer_count >= 4:
            return EASY
        if answer_count >= 2:
            return MEDIUM
        return HARD

    if answer_count >= preferred_max + 2:
        return EASY
    if preferred_min <= answer_count <= preferred_max:
        return MEDIUM
    return HARD


def calculate_score(
    answer_count: int,
    row_dimension: FeatureDimension,
    col_dimension: FeatureDimension,
    row_preferred: bool,
    col_preferred: bool,
    question_type: str,
    min_answers: int,
    preferred_min: int,
    preferred_max: int,
) -> int:
    """Quality score used to rank candidates."""
    if preferred_min <= answer_count <= preferred_max:
        score = 100
    elif answer_count >= min_answers:
        score = 70
    else:
        score = 30

    score += PAIR_TYPE_BONUS.get(frozenset((row_dimension, col_dimension)), 0)

    if row_dimension is FeatureDimension.TEAM and row_preferred:
        score += PREFERRED_TEAM_BONUS
    if col_dimension is FeatureDimension.TEAM and col_preferred:
        score += PREFERRED_TEAM_BONUS

    if question_type == TEAM_PAIR and row_preferred and col_preferred:
        score += BOTH_PREFERRED_TEAM_PAIR_BONUS

    return score


class CombinationIndex:
    """
    Immutable result of precomputation.

    Built once per entity pool and shared read-only by any number of grid
    assemblers. Lookups accept either orientation of a computed pair.

    Attributes:
        candidates: Candidates sorted by (team priority desc, score desc)
        features: Feature values the index was computed from
        entity_count: Size of the entity pool
        min_answers_required: Threshold a cell must meet to be valid
        allow_team_pairs: Whether team×team candidates were computed
        excluded_team_count: Size of the configured exclusion list
        generation: Cache generation this index belongs to
    """

    def __init__(
        self,
        candidates: Sequence[CombinationCandidate],
        features: ExtractedFeatures,
        entity_count: int,
        min_answers_required: int,
        allow_team_pairs: bool = False,
        excluded_team_count: int = 0,
        generation: int = 0,
    ):
        self.candidates: Tuple[CombinationCandidate, ...] = tuple(candidates)
        self.features = features
        self.entity_count = entity_count
        self.min_answers_required = min_answers_required
        self.allow_team_pairs = allow_team_pairs
        self.excluded_team_count = excluded_team_count
        self.generation = generation

        self._lookup: Dict[LookupKey, CombinationCandidate] = {}
        participating: Dict[FeatureDimension, set] = {
            dimension: set() for dimension in FeatureDimension
        }

        for candidate in self.candidates:
            self._lookup[candidate.key] = candidate
            transposed = candidate.transposed()
            self._lookup.setdefault(transposed.key, transposed)
            participating[candidate.row_dimension].add(candidate.row_feature)
            participating[candidate.col_dimension].add(candidate.col_feature)

        # keep the extractor's ordering (teams by priority)
        self._participating: Dict[FeatureDimension, Tuple[str, ...]] = {
            dimension: tuple(
                value
                for value in features.values_for(dimension)
                if value in participating[dimension]
            )
            for dimension in FeatureDimension
        }

    def __len__(self) -> int:
        return len(self.candidates)

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    def lookup(self, row: GridHeader, col: GridHeader) -> Optional[CombinationCandidate]:
        """Resolve a cell. Returns None if the pair was never computed or was dropped."""
        return self._lookup.get((row.value, row.dimension, col.value, col.dimension))

    def participating_values(self, dimension: FeatureDimension) -> Tuple[str, ...]:
        """Values of a dimension that appear in at least one candidate."""
        return self._participating[dimension]

    def get_quality_stats(self) -> Dict[str, int]:
        stats = dict(Counter(candidate.difficulty for candidate in self.candidates))
        stats["total"] = len(self.candidates)
        return stats

    def get_stats(self) -> Dict:
        counts = np.array([candidate.answer_count for candidate in self.candidates])
        return {
            "totalCombinations": len(self.candidates),
            "excludedTeams": self.excluded_team_count,
            "byDifficulty": self.get_quality_stats(),
            "byQuestionType": dict(
                Counter(candidate.question_type for candidate in self.candidates)
            ),
            "averageAnswers": float(np.mean(counts)) if counts.size else 0.0,
            "entityCount": self.entity_count,
            "generation": self.generation,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Candidate table, one row per candidate, in ranking order."""
        columns = [
            "row_feature",
            "row_type",
            "col_feature",
            "col_type",
            "answer_count",
            "difficulty",
            "score",
            "team_priority_score",
            "question_type",
        ]
        rows = [
            {
                "row_feature": candidate.row_feature,
                "row_type": candidate.row_dimension.value,
                "col_feature": candidate.col_feature,
                "col_type": candidate.col_dimension.value,
                "answer_count": candidate.answer_count,
                "difficulty": candidate.difficulty,
                "score": candidate.score,
                "team_priority_score": candidate.team_priority_score,
                "question_type": candidate.question_type,
            }
            for candidate in self.candidates
        ]
        return pd.DataFrame(rows, columns=columns)


class CombinationPrecomputer:
    """
    Builds a CombinationIndex from an entity pool.

    This is the expensive step: run it once per pool load and share the
    resulting index.
    """

    def __init__(self, team_filter: TeamFilter = None, generation_config: Dict = None):
        """
        Initialize the precomputer.

        Args:
            team_filter: Team exclusion/priority rules (default from config)
            generation_config: Overrides for get_generation_config() values
        """
        self.team_filter = team_filter or TeamFilter()
        self.generation_config = get_config().get_generation_config()
        if generation_config:
            self.generation_config.update(generation_config)

        self.min_answers = self.generation_config["min_answers_required"]
        self.team_pair_min_answers = self.generation_config["team_pair_min_answers"]
        self.preferred_min = self.generation_config["preferred_answer_min"]
        self.preferred_max = self.generation_config["preferred_answer_max"]
        self.include_team_pairs = self.generation_config["include_team_pairs"]

    def build_index(self, entities: Sequence[Entity], generation: int = 0) -> CombinationIndex:
        """Extract features from the pool and precompute all combinations."""
        features = FeatureExtractor(self.team_filter).extract(entities)
        return self.precompute(
            features.teams, features.roles, features.nationalities, entities, generation
        )

    def precompute(
        self,
        teams: Sequence[str],
        roles: Sequence[str],
        nationalities: Sequence[str],
        entities: Sequence[Entity],
        generation: int = 0,
    ) -> CombinationIndex:
        """
        Compute every candidate above the minimum-answer threshold.

        Args:
            teams: Team values (excluded teams never match)
            roles: Role values
            nationalities: Nationality values
            entities: Entity pool
            generation: Cache generation stamped on the index

        Returns:
            CombinationIndex over the surviving candidates
        """
        logger.info("🔄 Pre-computing all valid combinations...")
        start_time = time.perf_counter()

        features = ExtractedFeatures(list(teams), list(roles), list(nationalities))
        names = np.array([entity.name for entity in entities], dtype=object)
        masks = {
            dimension: self._membership_matrix(
                features.values_for(dimension), dimension, entities
            )
            for dimension in FeatureDimension
        }

        candidates: List[CombinationCandidate] = []

        for row_dimension, col_dimension in STANDARD_DIMENSION_PAIRS:
            row_values = features.values_for(row_dimension)
            col_values = features.values_for(col_dimension)
            if not row_values or not col_values or not len(names):
                continue

            row_matrix = masks[row_dimension]
            col_matrix = masks[col_dimension]
            counts = row_matrix.astype(np.int32) @ col_matrix.T.astype(np.int32)

            for i, j in zip(*np.nonzero(counts >= self.min_answers)):
                answers = names[row_matrix[i] & col_matrix[j]]
                candidates.append(
                    self._create_candidate(
                        row_values[i],
                        row_dimension,
                        col_values[j],
                        col_dimension,
                        tuple(answers),
                        STANDARD,
                    )
                )

        if self.include_team_pairs and len(features.teams) > 1 and len(names):
            team_matrix = masks[FeatureDimension.TEAM]
            counts = team_matrix.astype(np.int32) @ team_matrix.T.astype(np.int32)
            # upper triangle only: unordered pairs of distinct teams
            counts = np.triu(counts, k=1)

            for i, j in zip(*np.nonzero(counts >= self.team_pair_min_answers)):
                answers = names[team_matrix[i] & team_matrix[j]]
                candidates.append(
                    self._create_candidate(
                        features.teams[i],
                        FeatureDimension.TEAM,
                        features.teams[j],
                        FeatureDimension.TEAM,
                        tuple(answers),
                        TEAM_PAIR,
                    )
                )

        candidates.sort(key=lambda c: (-c.team_priority_score, -c.score))

        index = CombinationIndex(
            candidates=candidates,
            features=features,
            entity_count=len(entities),
            min_answers_required=self.min_answers,
            allow_team_pairs=self.include_team_pairs,
            excluded_team_count=self.team_filter.excluded_count,
            generation=generation,
        )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"✅ Pre-computed {len(index)} valid combinations in {elapsed_ms:.0f}ms")
        logger.info(f"📈 Quality distribution: {index.get_quality_stats()}")

        return index

    def _membership_matrix(
        self, values: Sequence[str], dimension: FeatureDimension, entities: Sequence[Entity]
    ) -> np.ndarray:
        """
        Boolean matrix [value, entity]: True where matches(entity, dimension, value).

        Filled from each entity's own feature values instead of testing every
        (value, entity) pair.
        """
        matrix = np.zeros((len(values), len(entities)), dtype=bool)
        positions = {
            value: row
            for row, value in enumerate(values)
            if is_header_allowed(dimension, value, self.team_filter)
        }

        if len(positions) < len(set(values)):
            logger.warning(
                f"Ignoring {len(set(values)) - len(positions)} excluded teams passed to precompute"
            )

        for column, entity in enumerate(entities):
            for value in feature_values(entity, dimension):
                row = positions.get(value)
                if row is not None:
                    matrix[row, column] = True

        return matrix

    def _create_candidate(
        self,
        row_feature: str,
        row_dimension: FeatureDimension,
        col_feature: str,
        col_dimension: FeatureDimension,
        answers: Tuple[str, ...],
        question_type: str,
    ) -> CombinationCandidate:
        answer_count = len(answers)
        row_is_team = row_dimension is FeatureDimension.TEAM
        col_is_team = col_dimension is FeatureDimension.TEAM

        team_priority_score = 0
        if row_is_team:
            team_priority_score += self.team_filter.priority_score(row_feature)
        if col_is_team:
            team_priority_score += self.team_filter.priority_score(col_feature)

        return CombinationCandidate(
            row_feature=row_feature,
            row_dimension=row_dimension,
            col_feature=col_feature,
            col_dimension=col_dimension,
            possible_answers=answers,
            difficulty=calculate_difficulty(
                answer_count, question_type, self.preferred_min, self.preferred_max
            ),
            score=calculate_score(
                answer_count,
                row_dimension,
                col_dimension,
                row_is_team and self.team_filter.is_preferred(row_feature),
                col_is_team and self.team_filter.is_preferred(col_feature),
                question_type,
                self.min_answers,
                self.preferred_min,
                self.preferred_max,
            ),
            team_priority_score=team_priority_score,
            question_type=question_type,
        )
