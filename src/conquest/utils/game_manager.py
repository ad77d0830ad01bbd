import random
from typing import Dict, List, Optional, Union

from ..game.game_state import GameState
from ..game.player import Roster
from ..game.territory import load_territory_data
from ..persistence.game_persistence import GamePersistence
from .config import get_settings
from .logger import conquest_logger


class GameManager:
    """Keeps running games by id and moves them in and out of storage."""

    def __init__(self, persistence: Optional[GamePersistence] = None,
                 territory_data: Optional[dict] = None):
        self.games: Dict[str, GameState] = {}
        self.persistence = persistence or GamePersistence()
        self.territory_data = territory_data or load_territory_data()

    def create_game(self, roster: Union[Roster, Dict[str, bool]],
                    rng: Optional[random.Random] = None) -> tuple[bool, str, str]:
        """
        Create and initialise a new game.
        Returns (success, game_id, message).
        """
        if rng is None:
            seed = get_settings().seed
            rng = random.Random(seed) if seed is not None else random.Random()

        game = GameState(territory_data=self.territory_data, rng=rng)
        try:
            game.initialize(roster)
        except ValueError as e:
            return False, "", f"Invalid roster: {e}"

        self.games[game.game_id] = game
        return True, game.game_id, f"Game created with ID: {game.game_id}"

    def get_game(self, game_id: str) -> Optional[GameState]:
        """Get a game by ID."""
        return self.games.get(game_id)

    def remove_game(self, game_id: str) -> bool:
        return self.games.pop(game_id, None) is not None

    def list_games(self) -> List[str]:
        return list(self.games)

    def save_game(self, game_id: str) -> bool:
        """Write a running game's snapshot to storage."""
        game = self.games.get(game_id)
        if game is None:
            return False
        return self.persistence.save_game_state(game_id, game.to_dict())

    def load_game(self, game_id: str) -> bool:
        """
        Replace (or create) the in-memory game from its saved snapshot.
        On any failure the running game is left as it was.
        """
        snapshot = self.persistence.load_game_state(game_id)
        if snapshot is None:
            return False

        game = self.games.get(game_id)
        try:
            if game is None:
                game = GameState.from_dict(snapshot, self.territory_data)
            else:
                game.restore(snapshot)
        except ValueError as e:
            conquest_logger.log_error(f"Saved game {game_id} is invalid: {e}")
            return False

        self.games[game_id] = game
        return True
