"""
Entity Loader

Builds the immutable entity pool from player records. Records may come from a
local JSON file, from a HuggingFace dataset, or directly from memory.

Accepted record layouts:
- {"name", "nationality", "teamHistory": [{"team", "seasons": [{"role", "year", "jersey_number"}]}]}
- the same with "team_history" instead of "teamHistory"
- raw exports where "teams" is a JSON-encoded team history string
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from datasets import load_dataset

from .data_structure import Entity, RoleStint, TeamStint
from ..utils.config_loader import get_config
from ..utils.unicode_utils import clean_unicode_text

logger = logging.getLogger(__name__)


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class EntityLoader:
    """
    Converts raw player records into Entity objects.

    Records without a name are skipped. Duplicate names keep the first record,
    since names are the answer strings and must be unique.
    """

    def __init__(self, hf_token: str = None):
        self.config = get_config()
        self.hf_token = hf_token or self.config.get_string("DEFAULT_HF_TOKEN", "")
        self.skipped_records = 0

    def from_records(self, records: Iterable[Dict[str, Any]]) -> List[Entity]:
        """
        Build entities from an iterable of record dicts.

        Args:
            records: Raw player records

        Returns:
            List of Entity objects in input order
        """
        entities = []
        seen_names = set()
        self.skipped_records = 0

        for record in records:
            entity = self._record_to_entity(record)
            if entity is None:
                self.skipped_records += 1
                continue
            if entity.name in seen_names:
                logger.debug(f"Skipping duplicate entity name: {entity.name}")
                self.skipped_records += 1
                continue
            seen_names.add(entity.name)
            entities.append(entity)

        logger.info(
            f"Loaded {len(entities)} entities (skipped {self.skipped_records} records)"
        )
        return entities

    def load_json(self, path: str) -> List[Entity]:
        """
        Load entities from a local JSON file holding a list of records.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file does not contain a list of records
        """
        json_path = Path(path)
        logger.info(f"Loading entity pool from {json_path}")

        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict) and "players" in data:
            data = data["players"]
        if not isinstance(data, list):
            raise ValueError(f"Entity file {json_path} must contain a list of records")

        return self.from_records(data)

    def load_hub_dataset(
        self, repo_id: str, config_name: str = None, split: str = "train"
    ) -> List[Entity]:
        """
        Load entities from a HuggingFace dataset.

        Args:
            repo_id: HuggingFace repository ID
            config_name: Optional dataset configuration
            split: Dataset split to read

        Returns:
            List of Entity objects
        """
        logger.info(f"Loading entity pool from {repo_id} ({split})")

        dataset_kwargs = {"split": split}
        if self.hf_token:
            dataset_kwargs["token"] = self.hf_token

        if config_name:
            dataset = load_dataset(repo_id, config_name, **dataset_kwargs)
        else:
            dataset = load_dataset(repo_id, **dataset_kwargs)

        return self.from_records(dataset)

    def _record_to_entity(self, record: Dict[str, Any]) -> Optional[Entity]:
        if not isinstance(record, dict):
            logger.warning(f"Skipping non-object record of type {type(record).__name__}")
            return None

        name = clean_unicode_text(record.get("name"))
        if not name:
            logger.debug(f"Skipping record without name: {record}")
            return None

        nationality = clean_unicode_text(record.get("nationality")) or ""

        history = record.get("teamHistory")
        if history is None:
            history = record.get("team_history")
        if history is None and record.get("teams"):
            history = self._parse_raw_teams(name, record["teams"])

        return Entity(
            name=name,
            nationality=nationality,
            team_history=tuple(self._parse_history(history or [])),
        )

    def _parse_raw_teams(self, name: str, raw_teams) -> List[Dict[str, Any]]:
        if isinstance(raw_teams, list):
            return raw_teams
        try:
            parsed = json.loads(raw_teams)
        except (TypeError, ValueError) as e:
            logger.warning(f"Unparseable team history for {name}: {e}")
            return []
        return parsed if isinstance(parsed, list) else []

    def _parse_history(self, history: List[Dict[str, Any]]) -> List[TeamStint]:
        stints = []
        for team_data in history:
            if not isinstance(team_data, dict):
                continue
            team = clean_unicode_text(team_data.get("team"))
            if not team:
                continue

            seasons = []
            for season in team_data.get("seasons") or []:
                if not isinstance(season, dict):
                    continue
                role = clean_unicode_text(season.get("role"))
                if not role:
                    continue
                seasons.append(
                    RoleStint(
                        role=role,
                        year=_optional_str(season.get("year") or season.get("season")),
                        jersey_number=_optional_str(season.get("jersey_number")),
                    )
                )

            stints.append(TeamStint(team=team, seasons=tuple(seasons)))
        return stints
