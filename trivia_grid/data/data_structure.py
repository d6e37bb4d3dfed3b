"""
Data structures for the entity pool.

An entity (a player) has a nationality and an ordered team history. Each team
stint lists the role stints (seasons) played there.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..utils.team_filters import TeamFilter


class FeatureDimension(Enum):
    """Attribute axes a grid header can be drawn from."""

    TEAM = "team"
    ROLE = "role"
    NATIONALITY = "nationality"


@dataclass(frozen=True)
class RoleStint:
    """One season (or spell) in a role at a team."""

    role: str
    year: Optional[str] = None
    jersey_number: Optional[str] = None


@dataclass(frozen=True)
class TeamStint:
    """A spell at one team with the roles played there."""

    team: str
    seasons: Tuple[RoleStint, ...] = ()


@dataclass(frozen=True)
class Entity:
    """
    Immutable member of the entity pool.

    Attributes:
        name: Unique display name (used as the answer string)
        nationality: Single categorical nationality value
        team_history: Ordered team stints
    """

    name: str
    nationality: str
    team_history: Tuple[TeamStint, ...] = field(default_factory=tuple)

    @property
    def teams(self) -> Tuple[str, ...]:
        return tuple(stint.team for stint in self.team_history)

    @property
    def roles(self) -> Tuple[str, ...]:
        return tuple(
            season.role
            for stint in self.team_history
            for season in stint.seasons
            if season.role
        )


def feature_values(entity: Entity, dimension: FeatureDimension) -> Tuple[str, ...]:
    """Values an entity holds in one dimension (its nationality, teams or roles)."""
    if dimension is FeatureDimension.NATIONALITY:
        return (entity.nationality,) if entity.nationality else ()
    if dimension is FeatureDimension.TEAM:
        return entity.teams
    if dimension is FeatureDimension.ROLE:
        return entity.roles
    raise ValueError(f"Unknown feature dimension: {dimension}")


def is_header_allowed(
    dimension: FeatureDimension,
    value: str,
    team_filter: "Optional[TeamFilter]" = None,
) -> bool:
    """Excluded teams can never be a header; every other value can."""
    if dimension is FeatureDimension.TEAM and team_filter is not None:
        return not team_filter.is_excluded(value)
    return True


def matches(
    entity: Entity,
    dimension: FeatureDimension,
    value: str,
    team_filter: "Optional[TeamFilter]" = None,
) -> bool:
    """
    Membership predicate for a single header.

    Args:
        entity: Entity to test
        dimension: Header dimension
        value: Header value
        team_filter: When given, stints at excluded teams never match

    Returns:
        True if the entity satisfies the header
    """
    if not is_header_allowed(dimension, value, team_filter):
        return False
    return value in feature_values(entity, dimension)


def is_valid_pairing(
    row_dimension: FeatureDimension,
    col_dimension: FeatureDimension,
    allow_team_pairs: bool = False,
) -> bool:
    """
    Whether a row/column dimension pair gives a meaningful cell.

    Two values from the same dimension never intersect usefully, except
    team×team ("played for both"), which is allowed only when enabled.
    """
    if row_dimension is not col_dimension:
        return True
    return row_dimension is FeatureDimension.TEAM and allow_team_pairs
