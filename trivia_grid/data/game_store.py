"""
Local Game Store

Minimal persistence collaborator: one JSON document per game, keyed by an
opaque game identifier. The generation core never depends on a save
succeeding; callers log failures and still return the grid.

Architecture:
- Game files stored in: {store_dir}/{game_id}.json
- Document layout: {"game": {...}, "questions": [...]}
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalGameStore:
    """
    Stores finalized games as JSON files on local disk.
    """

    def __init__(self, store_dir: str = None):
        """
        Initialize the store with the specified directory.

        Args:
            store_dir: Directory for game files. Defaults to trivia_grid/data/saved_games
        """
        if store_dir is None:
            store_dir = Path(__file__).parent / "saved_games"
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"LocalGameStore initialized with directory: {self.store_dir}")

    def _game_path(self, game_id: str) -> Path:
        if not game_id:
            raise ValueError("Game ID cannot be empty")
        return self.store_dir / f"{_UNSAFE_ID_CHARS.sub('_', game_id)}.json"

    def save_game(
        self, game_id: str, game: Dict[str, Any], questions: List[Dict[str, Any]]
    ) -> str:
        """
        Save a game document.

        Args:
            game_id: Opaque game identifier
            game: Game-level fields (mode, session, status, timestamps)
            questions: Serialized question records

        Returns:
            Path to the saved file

        Raises:
            OSError: If the file cannot be written
        """
        game_file = self._game_path(game_id)
        document = {"game": game, "questions": questions}

        with open(game_file, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved game {game_id} with {len(questions)} questions to {game_file}")
        return str(game_file)

    def load_game(self, game_id: str) -> Optional[Dict[str, Any]]:
        """
        Load a game document.

        Returns:
            The stored document, or None if no game exists with that id
        """
        game_file = self._game_path(game_id)
        if not game_file.exists():
            logger.warning(f"No stored game found for id: {game_id}")
            return None

        with open(game_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def list_game_ids(self) -> List[str]:
        return sorted(path.stem for path in self.store_dir.glob("*.json"))

    def delete_game(self, game_id: str) -> bool:
        game_file = self._game_path(game_id)
        if not game_file.exists():
            return False
        game_file.unlink()
        logger.info(f"Deleted stored game: {game_id}")
        return True
