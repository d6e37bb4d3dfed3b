"""
Team exclusion and priority rules.

Excluded teams (youth, reserve, unknown and explicitly unwanted clubs) are never
offered as headers. Remaining teams are ranked so that well-known clubs are
preferred when headers are sampled.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .config_loader import get_config

logger = logging.getLogger(__name__)

EXCLUDED_PRIORITY = -1
LOW_PRIORITY = 1
DEFAULT_PRIORITY = 2
PREFERRED_PRIORITY = 3


def _normalize_team(name: str) -> str:
    return name.lower().strip()


class TeamFilter:
    """
    Classifies team names against configured exclusion/preference lists.

    Matching is case-insensitive. Exclusion and low priority use containment
    in either direction ("Barcelona U19" is excluded by "U19"); preference
    requires an exact match.
    """

    def __init__(
        self,
        excluded_teams: Optional[Iterable[str]] = None,
        preferred_teams: Optional[Iterable[str]] = None,
        low_priority_teams: Optional[Iterable[str]] = None,
    ):
        if None in (excluded_teams, preferred_teams, low_priority_teams):
            filter_config = get_config().get_team_filter_config()

        if excluded_teams is None:
            excluded_teams = filter_config["excluded_teams"]
        if preferred_teams is None:
            preferred_teams = filter_config["preferred_teams"]
        if low_priority_teams is None:
            low_priority_teams = filter_config["low_priority_teams"]

        self.excluded_teams: List[str] = [
            _normalize_team(team) for team in excluded_teams if team.strip()
        ]
        self.preferred_teams = {
            _normalize_team(team) for team in preferred_teams if team.strip()
        }
        self.low_priority_teams: List[str] = [
            _normalize_team(team) for team in low_priority_teams if team.strip()
        ]

        logger.debug(
            f"TeamFilter: {len(self.excluded_teams)} excluded, "
            f"{len(self.preferred_teams)} preferred, "
            f"{len(self.low_priority_teams)} low priority"
        )

    @classmethod
    def from_config(cls, filter_config: Dict[str, List[str]]) -> "TeamFilter":
        return cls(
            excluded_teams=filter_config.get("excluded_teams", []),
            preferred_teams=filter_config.get("preferred_teams", []),
            low_priority_teams=filter_config.get("low_priority_teams", []),
        )

    @staticmethod
    def _contains_either_way(team: str, patterns: List[str]) -> bool:
        return any(pattern in team or team in pattern for pattern in patterns)

    def is_excluded(self, team_name: str) -> bool:
        return self._contains_either_way(_normalize_team(team_name), self.excluded_teams)

    def is_preferred(self, team_name: str) -> bool:
        return _normalize_team(team_name) in self.preferred_teams

    def is_low_priority(self, team_name: str) -> bool:
        return self._contains_either_way(
            _normalize_team(team_name), self.low_priority_teams
        )

    def priority_score(self, team_name: str) -> int:
        """
        Rank a team for header selection.

        Returns:
            -1 if excluded, 3 if preferred, 1 if low priority, otherwise 2
        """
        if self.is_excluded(team_name):
            return EXCLUDED_PRIORITY
        if self.is_preferred(team_name):
            return PREFERRED_PRIORITY
        if self.is_low_priority(team_name):
            return LOW_PRIORITY
        return DEFAULT_PRIORITY

    @property
    def excluded_count(self) -> int:
        return len(self.excluded_teams)
