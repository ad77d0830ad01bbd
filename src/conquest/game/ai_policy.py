"""
Weighted-random decision policy for automated competitors.

A turn is one placement step followed by a loop of draws in [0, AI_MAX):
the value AI_THRESHOLD stops the loop, values above it try a move (which
ends the turn) and everything below it tries an attack.

    attack = AI_THRESHOLD / AI_MAX
    stop   = 1 / AI_MAX
    move   = (AI_MAX - AI_THRESHOLD - 1) / AI_MAX
"""

import random
from typing import TYPE_CHECKING, Dict, List, Optional

from .combat import CombatEngine
from .errors import PolicyExhaustedError

if TYPE_CHECKING:
    from .game_state import GameState
    from .territory import Territory

AI_MAX = 20
AI_THRESHOLD = 16


class AutomatedPolicy:
    """Plays the current competitor's turn through the public GameState operations."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def take_turn(self, game: "GameState") -> None:
        name = game.current_competitor.name
        game.start_automated_turn()
        game.place(self.plan_placement(game, name))

        roll = self.rng.randrange(AI_MAX)
        while roll != AI_THRESHOLD and not self._all_land_has_one_army(game, name):
            if roll > AI_THRESHOLD and self.movable_sources(game, name):
                # A move always ends the turn
                self._move(game, name)
                return
            if self.attack_sources(game, name):
                if self._attack(game, name):
                    return
            roll = self.rng.randrange(AI_MAX)

        if game.is_first_turn:
            game.done()
        else:
            game.pass_turn()

    def plan_placement(self, game: "GameState", name: str) -> Dict[str, int]:
        """Spread this turn's reinforcements over random frontier territories."""
        remaining = game.calculate_reinforcements(name)
        frontier = game.territory_manager.land_with_adjacent_enemy(name)

        allocation: Dict[str, int] = {}
        while remaining > 0:
            territory = self._pick(frontier, "placement")
            share = self.rng.randint(1, remaining)
            allocation[territory.territory_id] = allocation.get(territory.territory_id, 0) + share
            remaining -= share
        return allocation

    def movable_sources(self, game: "GameState", name: str) -> List["Territory"]:
        return [t for t in game.territory_manager.land_with_adjacent_friendly(name) if t.army_count > 1]

    def attack_sources(self, game: "GameState", name: str) -> List["Territory"]:
        return [t for t in game.territory_manager.land_with_adjacent_enemy(name) if t.can_attack_from()]

    def _move(self, game: "GameState", name: str) -> None:
        source = self._pick(self.movable_sources(game, name), "move source")
        target = self._pick(game.territory_manager.adjacent_friendlies(source), "move target")
        count = self.rng.randint(1, source.army_count - 1)
        game.move(count, source, target)

    def _attack(self, game: "GameState", name: str) -> bool:
        """Run one attack. Returns True if it won the game."""
        attacking = self._pick(self.attack_sources(game, name), "attack source")
        defending = self._pick(game.territory_manager.adjacent_enemies(attacking), "attack target")

        attack_armies = self.rng.randint(1, CombatEngine.max_attack_dice(attacking.army_count))
        defend_armies = game.choose_defenders(defending)

        if not game.attack(attacking, attack_armies, defending, defend_armies):
            return False

        transfer = self.rng.randint(attack_armies, attacking.army_count - 1)
        return game.attack_won(attacking, defending, transfer)

    @staticmethod
    def _all_land_has_one_army(game: "GameState", name: str) -> bool:
        return all(t.army_count == 1 for t in game.territories_of(name))

    def _pick(self, candidates: List["Territory"], purpose: str) -> "Territory":
        if not candidates:
            raise PolicyExhaustedError(f"No eligible territory for {purpose}")
        return self.rng.choice(candidates)
