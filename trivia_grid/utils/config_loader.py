"""
Configuration Management System for the Trivia Grid generator.

This module provides centralized configuration management for grid generation.
It loads parameters from grid_config.txt with type-safe parsing, hierarchical fallbacks,
and default values for all system components.

Key Features:
- Type-safe parameter parsing (string, int, float, bool, comma-separated lists)
- Hierarchical configuration: CLI args → Config file → Defaults
- Single named constants for every threshold (minimum answers, valid cells, attempts)
- Team filter lists (excluded, preferred, low priority) kept out of code

Architecture:
- ConfigLoader: Main configuration management class
- Global config singleton via get_config()
- Automatic project root detection
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Union

logger = logging.getLogger(__name__)

__all__ = ["ConfigLoader", "get_config", "reload_config"]


DEFAULT_EXCLUDED_TEAMS = (
    "Youth Team,Reserve Team,B Team,Academy,U21,U19,U18,"
    "Celtic,PSV,Frankfurt,Olympiacos,Wolfsburg,Real Betis,Schalke,Feyenoord,Marsilya,Leeds,"
    "Unknown,Free Agent,Diğer,Bilinmeyen,Bilinmeyen Takım,Diğer Takımlar,"
    "Amateur,Local Club,Training Camp"
)

DEFAULT_LOW_PRIORITY_TEAMS = (
    "Championship Teams,Second Division,League Two,Third Division,"
    "2. Lig,3. Lig,TFF 1. Lig,Lower Division Teams"
)

DEFAULT_PREFERRED_TEAMS = (
    "Galatasaray,Fenerbahçe,Beşiktaş,Trabzonspor,Başakşehir,Konyaspor,Sivasspor,"
    "Barcelona,Real Madrid,Manchester United,Manchester City,Liverpool,Chelsea,"
    "Arsenal,Tottenham,Bayern Münih,Borussia Dortmund,PSG,Juventus,AC Milan,Inter,"
    "Atletico Madrid,Sevilla,Valencia,Ajax,Porto,Benfica,Rangers,Napoli,Roma,"
    "Lazio,Atalanta"
)

# (rows, cols) per FALLBACK_TEMPLATE_<n>
DEFAULT_FALLBACK_TEMPLATES = (
    (
        "team:Galatasaray,team:Fenerbahçe,team:Beşiktaş",
        "role:Forvet,role:Defans,nationality:Türkiye",
    ),
    (
        "team:Barcelona,team:Real Madrid,team:Juventus",
        "role:Forward,role:Midfielder,role:Defender",
    ),
    (
        "team:Manchester United,team:Chelsea,role:Goalkeeper",
        "nationality:England,nationality:Spain,nationality:France",
    ),
)


class ConfigLoader:
    """
    Loads and manages configuration parameters for grid generation.

    Provides type-safe access to configuration values with defaults.
    """

    def __init__(self, config_file: str = "grid_config.txt"):
        """
        Initialize configuration loader.

        Args:
            config_file: Path to configuration file relative to project root
        """
        self.config_file = config_file
        self.config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """Load configuration from file."""
        current_path = Path(__file__).parent
        config_path = None

        # Search up the directory tree
        for _ in range(5):
            potential_path = current_path / self.config_file
            if potential_path.exists():
                config_path = potential_path
                break
            current_path = current_path.parent

        if config_path is None:
            logger.warning(f"Config file {self.config_file} not found, using defaults")
            self._load_defaults()
            return

        logger.info(f"Loading configuration from {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()

                    if not line or line.startswith("#"):
                        continue

                    if "=" not in line:
                        logger.warning(f"Invalid config line {line_num}: {line}")
                        continue

                    key, value = line.split("=", 1)
                    self.config[key.strip()] = self._parse_value(value.strip())

            logger.info(f"Loaded {len(self.config)} configuration parameters")

        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to load config: {e}")
            self._load_defaults()

    def _parse_value(self, value: str) -> Union[str, int, float, bool]:
        """Parse string value to appropriate Python type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        if value.replace(".", "", 1).replace("-", "", 1).isdigit():
            if "." in value:
                return float(value)
            return int(value)

        return value

    def _load_defaults(self):
        """Load default configuration values."""
        self.config = {
            # Answer quality
            "MINIMUM_ANSWERS_REQUIRED": 3,
            "PREFERRED_ANSWER_MIN": 4,
            "PREFERRED_ANSWER_MAX": 7,
            "TEAM_PAIR_MIN_ANSWERS": 2,
            "INCLUDE_TEAM_PAIRS": False,
            # Grid assembly
            "MAX_GENERATION_ATTEMPTS": 50,
            "MIN_VALID_CELLS": 7,
            "GENERATION_TIMEOUT_SECONDS": 5,
            "FRESH_REGENERATION_ATTEMPTS": 5,
            # Team filters
            "EXCLUDED_TEAMS": DEFAULT_EXCLUDED_TEAMS,
            "LOW_PRIORITY_TEAMS": DEFAULT_LOW_PRIORITY_TEAMS,
            "PREFERRED_TEAMS": DEFAULT_PREFERRED_TEAMS,
            # Storage / CLI defaults
            "GAME_STORE_DIR": "saved_games",
            "DEFAULT_ENTITY_FILE": "players.json",
            "DEFAULT_GAME_MODE": "single",
            "DEFAULT_GAME_COUNT": 1,
        }
        for number, (rows, cols) in enumerate(DEFAULT_FALLBACK_TEMPLATES, start=1):
            self.config[f"FALLBACK_TEMPLATE_{number}_ROWS"] = rows
            self.config[f"FALLBACK_TEMPLATE_{number}_COLS"] = cols

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration parameter name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self.config.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get integer configuration value."""
        value = self.get(key, default)
        try:
            return int(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid integer value for {key}: {value}")
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get float configuration value."""
        value = self.get(key, default)
        try:
            return float(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid float value for {key}: {value}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get boolean configuration value."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return default

    def get_string(self, key: str, default: str = "") -> str:
        """Get string configuration value."""
        value = self.get(key, default)
        return str(value) if value is not None else default

    def get_list_of_strings(self, key: str, default: str = "") -> List[str]:
        """Get list of strings from comma-separated string configuration value."""
        value = self.get_string(key, default)
        return [item.strip() for item in value.split(",") if item.strip()]

    def get_generation_config(self) -> Dict[str, Any]:
        """Get grid generation configuration parameters."""
        return {
            "min_answers_required": self.get_int("MINIMUM_ANSWERS_REQUIRED", 3),
            "preferred_answer_min": self.get_int("PREFERRED_ANSWER_MIN", 4),
            "preferred_answer_max": self.get_int("PREFERRED_ANSWER_MAX", 7),
            "team_pair_min_answers": self.get_int("TEAM_PAIR_MIN_ANSWERS", 2),
            "include_team_pairs": self.get_bool("INCLUDE_TEAM_PAIRS", False),
            "max_generation_attempts": self.get_int("MAX_GENERATION_ATTEMPTS", 50),
            "min_valid_cells": self.get_int("MIN_VALID_CELLS", 7),
            "generation_timeout_seconds": self.get_float(
                "GENERATION_TIMEOUT_SECONDS", 5.0
            ),
            "fresh_regeneration_attempts": self.get_int(
                "FRESH_REGENERATION_ATTEMPTS", 5
            ),
        }

    def get_team_filter_config(self) -> Dict[str, List[str]]:
        """Get team exclusion / preference lists."""
        return {
            "excluded_teams": self.get_list_of_strings(
                "EXCLUDED_TEAMS", DEFAULT_EXCLUDED_TEAMS
            ),
            "low_priority_teams": self.get_list_of_strings(
                "LOW_PRIORITY_TEAMS", DEFAULT_LOW_PRIORITY_TEAMS
            ),
            "preferred_teams": self.get_list_of_strings(
                "PREFERRED_TEAMS", DEFAULT_PREFERRED_TEAMS
            ),
        }

    def get_fallback_templates(self) -> List[Dict[str, List[str]]]:
        """
        Get hand-authored fallback header templates.

        Each template is configured as FALLBACK_TEMPLATE_<n>_ROWS / _COLS, a
        comma-separated list of ``dimension:value`` headers.
        """
        templates = []
        for index in range(1, 10):
            rows = self.get_list_of_strings(f"FALLBACK_TEMPLATE_{index}_ROWS")
            cols = self.get_list_of_strings(f"FALLBACK_TEMPLATE_{index}_COLS")
            if not rows or not cols:
                continue
            templates.append({"rows": rows, "cols": cols})
        return templates

    def get_cli_defaults(self) -> Dict[str, Any]:
        """Get CLI default values."""
        return {
            "entity_file": self.get_string("DEFAULT_ENTITY_FILE", "players.json"),
            "game_mode": self.get_string("DEFAULT_GAME_MODE", "single"),
            "store_dir": self.get_string("GAME_STORE_DIR", "saved_games"),
            "count": self.get_int("DEFAULT_GAME_COUNT", 1),
            "hf_token": self.get_string("DEFAULT_HF_TOKEN", ""),
        }


# Global configuration instance
_config = None


def get_config() -> ConfigLoader:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = ConfigLoader()
    return _config


def reload_config():
    """Reload configuration from file."""
    global _config
    _config = ConfigLoader()
    return _config
