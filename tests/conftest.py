import random

import pytest

from conquest.game.game_state import GameState


class RecordingObserver:
    """Collects every notification the engine sends."""

    def __init__(self):
        self.phases = []
        self.lines = []

    def on_state_changed(self, game):
        self.phases.append(game.phase)

    def on_log_line(self, message):
        self.lines.append(message)


class FixedDice:
    """Random source whose randint calls return queued values, in order."""

    def __init__(self, values):
        self.values = list(values)

    def randint(self, a, b):
        value = self.values.pop(0)
        assert a <= value <= b
        return value


def enemy_pair(game, name):
    """An owned territory of ``name`` and one enemy neighbour of it."""
    own = game.territory_manager.land_with_adjacent_enemy(name)[0]
    enemy = game.territory_manager.adjacent_enemies(own)[0]
    return own, enemy


def new_game(names, seed=7):
    game = GameState(game_id="testgame", rng=random.Random(seed))
    game.initialize(names)
    return game


@pytest.fixture
def two_player_game():
    return new_game({"Patrick": False, "Spongebob": False})


@pytest.fixture
def observer():
    return RecordingObserver()
