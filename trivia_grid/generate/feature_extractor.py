"""
Attribute extraction from the entity pool.

One pass over the pool yields the deduplicated team, role and nationality
values that grid headers are drawn from.
"""

import logging
from typing import Dict, List, NamedTuple, Sequence

from ..data.data_structure import Entity, FeatureDimension
from ..utils.team_filters import TeamFilter

logger = logging.getLogger(__name__)


class ExtractedFeatures(NamedTuple):
    """Feature values per dimension, teams ordered by priority."""

    teams: List[str]
    roles: List[str]
    nationalities: List[str]

    def values_for(self, dimension: FeatureDimension) -> List[str]:
        if dimension is FeatureDimension.TEAM:
            return self.teams
        if dimension is FeatureDimension.ROLE:
            return self.roles
        return self.nationalities


class FeatureExtractor:
    """
    Extracts header candidates from entities.

    Excluded teams are dropped on insertion; roles and nationalities are not
    filtered.
    """

    def __init__(self, team_filter: TeamFilter = None):
        self.team_filter = team_filter or TeamFilter()

    def extract(self, entities: Sequence[Entity]) -> ExtractedFeatures:
        """
        Extract unique features from the pool.

        Args:
            entities: Entity pool

        Returns:
            ExtractedFeatures; all lists are empty for an empty pool
        """
        # dicts keep first-seen order
        teams: Dict[str, None] = {}
        roles: Dict[str, None] = {}
        nationalities: Dict[str, None] = {}
        excluded_seen = set()

        for entity in entities:
            if entity.nationality:
                nationalities[entity.nationality] = None

            for stint in entity.team_history:
                if self.team_filter.is_excluded(stint.team):
                    excluded_seen.add(stint.team)
                else:
                    teams[stint.team] = None

                for season in stint.seasons:
                    if season.role:
                        roles[season.role] = None

        # stable sort: preferred teams first, original order within a tier
        sorted_teams = sorted(
            teams, key=lambda team: self.team_filter.priority_score(team), reverse=True
        )

        features = ExtractedFeatures(
            teams=sorted_teams,
            roles=list(roles),
            nationalities=list(nationalities),
        )

        preferred_count = sum(1 for team in sorted_teams if self.team_filter.is_preferred(team))
        logger.info(
            f"Extracted features: {len(features.teams)} teams, {len(features.roles)} roles, "
            f"{len(features.nationalities)} nationalities"
        )
        logger.info(
            f"Preferred teams: {preferred_count}, excluded team names skipped: {len(excluded_seen)}"
        )

        return features
