"""
Entity pool data structures, loading and game persistence.
"""

from .data_structure import (
    Entity,
    TeamStint,
    RoleStint,
    FeatureDimension,
    feature_values,
    is_header_allowed,
    matches,
    is_valid_pairing,
)
from .entity_loader import EntityLoader
from .game_store import LocalGameStore

__all__ = [
    "Entity",
    "TeamStint",
    "RoleStint",
    "FeatureDimension",
    "feature_values",
    "is_header_allowed",
    "matches",
    "is_valid_pairing",
    "EntityLoader",
    "LocalGameStore",
]
