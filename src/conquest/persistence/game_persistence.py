import json
import threading
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from pathlib import Path

from ..utils.config import get_settings
from ..utils.logger import conquest_logger

SAVE_FORMAT_VERSION = '1.0'


class GamePersistence:
    """Stores complete game snapshots as one JSON file per game."""

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = Path(data_dir) if data_dir else Path(get_settings().data_dir)
        self.games_dir = self.data_dir / 'games'
        self.lock = threading.RLock()

    def get_game_file_path(self, game_id: str) -> Path:
        """Get the file path for a game's persistent state."""
        return self.games_dir / f"{game_id}.json"

    def save_game_state(self, game_id: str, game_state: Dict[str, Any]) -> bool:
        """Save game state to persistent storage."""
        try:
            with self.lock:
                self.games_dir.mkdir(parents=True, exist_ok=True)
                game_file = self.get_game_file_path(game_id)
                temp_file = game_file.with_suffix('.tmp')

                save_data = {
                    'game_id': game_id,
                    'saved_at': datetime.now(timezone.utc).isoformat(),
                    'version': SAVE_FORMAT_VERSION,
                    'game_state': game_state
                }

                # Atomic write using temporary file
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(save_data, f, indent=2)

                temp_file.replace(game_file)

                conquest_logger.log_game_event('game_saved', str(game_file), game_id)
                return True

        except (OSError, TypeError, ValueError) as e:
            conquest_logger.log_error(f"Failed to save game state {game_id}: {e}")
            return False

    def load_game_state(self, game_id: str) -> Optional[Dict[str, Any]]:
        """Load game state from persistent storage."""
        try:
            with self.lock:
                game_file = self.get_game_file_path(game_id)

                if not game_file.exists():
                    return None

                with open(game_file, 'r', encoding='utf-8') as f:
                    save_data = json.load(f)

                if 'game_state' not in save_data:
                    conquest_logger.log_error(f"Invalid save data for {game_id}: missing game_state")
                    return None

                conquest_logger.log_game_event('game_loaded', str(game_file), game_id)
                return save_data['game_state']

        except (OSError, ValueError) as e:
            conquest_logger.log_error(f"Failed to load game state {game_id}: {e}")
            return None

    def delete_game_state(self, game_id: str) -> bool:
        """Delete game state from persistent storage."""
        try:
            with self.lock:
                game_file = self.get_game_file_path(game_id)
                if game_file.exists():
                    game_file.unlink()
                    conquest_logger.log_info(f"Game state deleted: {game_id}")
                return True

        except OSError as e:
            conquest_logger.log_error(f"Failed to delete game state {game_id}: {e}")
            return False

    def list_saved_games(self) -> list[str]:
        """List all saved game IDs."""
        with self.lock:
            if not self.games_dir.exists():
                return []
            return sorted(f.stem for f in self.games_dir.glob("*.json"))

    def get_save_info(self, game_id: str) -> Optional[Dict[str, Any]]:
        """Get metadata about a saved game."""
        try:
            with self.lock:
                game_file = self.get_game_file_path(game_id)

                if not game_file.exists():
                    return None

                with open(game_file, 'r', encoding='utf-8') as f:
                    save_data = json.load(f)

                return {
                    'game_id': save_data.get('game_id'),
                    'saved_at': save_data.get('saved_at'),
                    'version': save_data.get('version'),
                    'file_size': game_file.stat().st_size,
                    'file_path': str(game_file)
                }

        except (OSError, ValueError) as e:
            conquest_logger.log_error(f"Failed to get save info for {game_id}: {e}")
            return None
