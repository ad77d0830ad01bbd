import random
import uuid
from typing import Dict, List, Optional, Tuple, Union
from datetime import datetime

from .player import Competitor, Roster
from .territory import Territory, TerritoryManager
from .combat import CombatEngine, CombatResult
from .distribution import distribute, starting_armies
from .phases import ACTION_RESULTS, PHASE_ACTIONS, GamePhase
from .snapshot import GameSnapshot
from .observers import DefenderPrompt, GameObserver
from .ai_policy import AutomatedPolicy
from .errors import ConquestError
from ..utils.logger import conquest_logger

TerritoryRef = Union[Territory, str]


class GameState:
    """Rules engine and turn/phase state machine for one game."""

    def __init__(self, game_id: Optional[str] = None, territory_data: Optional[dict] = None,
                 rng: Optional[random.Random] = None):
        self.game_id = game_id or str(uuid.uuid4())[:8]
        self.rng = rng or random.Random()
        self.territory_manager = TerritoryManager(territory_data)
        self.policy = AutomatedPolicy(self.rng)
        self.created_at = datetime.now()

        # Every competitor ever seated, in turn order; eliminated ones stay here
        self.competitors: Dict[str, Competitor] = {}
        self.active_order: List[str] = []
        self.current_competitor_name: Optional[str] = None
        self.phase = GamePhase.PLACE
        self.first_turn = True
        self.turn_number = 1
        self.last_battle: Optional[CombatResult] = None

        self.game_log: List[str] = []
        self._observers: List[GameObserver] = []
        self.defender_prompt: Optional[DefenderPrompt] = None
        self._automated_chain = False

    # Collaborators

    def add_observer(self, observer: GameObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: GameObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def set_defender_prompt(self, prompt: Optional[DefenderPrompt]) -> None:
        self.defender_prompt = prompt

    # Setup

    def initialize(self, roster: Union[Roster, Dict[str, bool]]) -> None:
        """
        Seat the competitors and run the distribution algorithm.
        A mapping of name -> is_automated is validated into a Roster first.
        """
        if self.competitors:
            raise ConquestError(f"Game {self.game_id} has already been initialised")
        if not isinstance(roster, Roster):
            roster = Roster.from_mapping(roster)

        for config in roster.competitors:
            self.competitors[config.name] = Competitor(name=config.name, is_automated=config.is_automated)
            self.active_order.append(config.name)

        distribute(self.territory_manager, self.active_order, self.rng)

        self.current_competitor_name = self.active_order[0]
        self.phase = GamePhase.PLACE
        self.first_turn = True

        armies = starting_armies(len(self.active_order))
        self.log_event(f"Territories assigned. Each competitor starts with {armies} armies.")
        self.log_event(f"Turn order: {', '.join(self.active_order)}")
        conquest_logger.log_game_event(
            'game_created', f"{len(self.active_order)} competitors: {', '.join(self.active_order)}", self.game_id
        )
        self._notify()

    def begin(self) -> None:
        """Hand control to the automated policy if an automated competitor moves first."""
        if self.current_competitor and self.current_competitor.is_automated:
            self._run_automated_turns()

    # Read-only accessors

    @property
    def current_competitor(self) -> Optional[Competitor]:
        if self.current_competitor_name is None:
            return None
        return self.competitors[self.current_competitor_name]

    @property
    def active_competitors(self) -> List[Competitor]:
        return [self.competitors[name] for name in self.active_order]

    @property
    def all_competitors(self) -> List[Competitor]:
        return list(self.competitors.values())

    @property
    def continents(self):
        return self.territory_manager.continents

    @property
    def is_first_turn(self) -> bool:
        return self.first_turn

    @property
    def is_game_over(self) -> bool:
        return len(self.active_order) == 1

    @property
    def winner(self) -> Optional[Competitor]:
        if self.is_game_over:
            return self.competitors[self.active_order[0]]
        return None

    def find_territory(self, territory_id) -> Optional[Territory]:
        return self.territory_manager.find_territory(territory_id)

    def owner_of(self, territory: Territory) -> Optional[Competitor]:
        owner = self.territory_manager.owner_of(territory)
        return self.competitors.get(owner) if owner else None

    def territories_of(self, name: str) -> List[Territory]:
        return self.territory_manager.get_territories_by_owner(name)

    def territory_count(self, name: str) -> int:
        return self.territory_manager.count_owned(name)

    def total_armies(self, name: str) -> int:
        return sum(t.army_count for t in self.territories_of(name))

    def calculate_reinforcements(self, name: str) -> int:
        """Armies a competitor may place at the start of a turn."""
        # Base reinforcement: territories / 3 (minimum 3)
        base_armies = max(3, self.territory_count(name) // 3)
        bonuses = self.territory_manager.get_player_continent_bonuses(name)
        return base_armies + sum(bonuses.values())

    def can_perform_action(self, action: str) -> Tuple[bool, str]:
        """
        Check whether the current phase offers an action.
        Returns (can_perform, reason).
        """
        if self.is_game_over:
            return False, "Game is over"
        if action not in ACTION_RESULTS:
            return False, f"Unknown action '{action}'"
        if action in PHASE_ACTIONS[self.phase]:
            return True, f"Can {action} during {self.phase.value} phase"
        return False, f"Cannot {action} during {self.phase.value} phase"

    def available_actions(self) -> List[str]:
        if self.is_game_over:
            return []
        return list(PHASE_ACTIONS[self.phase])

    # Operations

    def place(self, allocation: Dict[str, int]) -> None:
        """Add armies per territory ID. Unknown or malformed IDs and negative counts are skipped."""
        self.phase = GamePhase.PLACE
        for territory_id, count in allocation.items():
            territory = self.find_territory(territory_id)
            if territory is None or count < 0:
                continue
            territory.add_army(count)
            owner = self.territory_manager.owner_of(territory)
            self.log_event(
                f"{owner} has placed {count} armies into {territory.name} "
                f"which now has {territory.army_count} armies\n"
            )
        self._notify()

    def move(self, count: int, from_territory: TerritoryRef, to_territory: TerritoryRef) -> bool:
        """
        Move armies between two territories, ending the mover's turn.
        Returns False (nothing changed, turn not passed) if the source cannot spare them.
        """
        source = self._resolve(from_territory)
        target = self._resolve(to_territory)
        if source is None or target is None or count < 1 or not source.remove_army(count):
            self.log_event(f"Cannot move {count} armies: the source must keep at least 1 army")
            conquest_logger.log_warning(f"Rejected move of {count} armies in game {self.game_id}")
            self._notify()
            return False

        target.add_army(count)
        owner = self.territory_manager.owner_of(source)
        self.log_event(f"{owner} has moved {count} armies from {source.name} to {target.name}")
        self.log_event("Move phase is over\n")

        if self.first_turn and self.current_competitor.is_automated:
            self.done()
        else:
            self.pass_turn()
        return True

    def attack(self, attacking: TerritoryRef, attack_armies: int,
               defending: TerritoryRef, defend_armies: int) -> bool:
        """
        Roll one round of battle.
        Returns True if the defender lost its last army; the caller then calls attack_won.
        """
        self.phase = GamePhase.ATTACK
        attacker_territory = self._resolve(attacking)
        defender_territory = self._resolve(defending)
        attacker_name = self.territory_manager.owner_of(attacker_territory)
        defender_name = self.territory_manager.owner_of(defender_territory)

        result = CombatEngine.resolve_battle(attack_armies, defend_armies, self.rng)
        for line in CombatEngine.format_rolls(attacker_name, attacker_territory.name,
                                              defender_territory.name, result):
            self.log_event(line)

        if defender_territory.remove_army(result.defender_losses):
            attacker_territory.remove_army(result.attacker_losses)
            self.log_event(
                f"The attacking territory lost {result.attacker_losses} unit(s)! "
                f"It has {attacker_territory.army_count} unit(s) left."
            )
            self.log_event(
                f"The defending territory lost {result.defender_losses} unit(s)! "
                f"It has {defender_territory.army_count} unit(s) left.\n"
            )
        else:
            result.territory_conquered = True

        conquest_logger.log_combat_result(
            attacker_name, defender_name, attacker_territory.territory_id,
            defender_territory.territory_id, result, self.game_id
        )
        self.last_battle = result
        self._notify()
        return result.territory_conquered

    def attack_won(self, attacking: TerritoryRef, defending: TerritoryRef, army_count: int) -> bool:
        """
        Hand a conquered territory to the attacker and move ``army_count`` armies into it.
        Returns True when only one competitor remains (game over).
        """
        self.phase = GamePhase.ATTACK
        attacker_territory = self._resolve(attacking)
        defender_territory = self._resolve(defending)

        if army_count < 1 or army_count >= attacker_territory.army_count:
            raise ValueError(
                f"Must move between 1 and {attacker_territory.army_count - 1} armies "
                f"into a conquered territory, got {army_count}"
            )

        attacker_name = self.territory_manager.owner_of(attacker_territory)
        defender_name = self.territory_manager.assign_owner(defender_territory, attacker_name)
        attacker_territory.remove_army(army_count)
        defender_territory.set_army_count(army_count)

        self.log_event(f"The defending territory lost all units and was conquered by {attacker_name}!")
        self.log_event(f"{army_count} armies were transferred to conquered land\n")
        conquest_logger.log_game_event(
            'territory_conquered', f"{attacker_name} took {defender_territory.name} from {defender_name}", self.game_id
        )

        game_over = False
        if defender_name is not None and self.territory_count(defender_name) == 0:
            self._eliminate(defender_name)
            if self.is_game_over:
                game_over = True
                self.log_event(f"{attacker_name} has conquered the world and won the game!")
                conquest_logger.log_game_event('game_won', f"{attacker_name} wins", self.game_id)

        self._notify()
        return game_over

    def pass_turn(self) -> None:
        """End the current competitor's turn and hand it to the next active competitor."""
        self.phase = GamePhase.TURN_COMPLETE
        previous = self.current_competitor_name
        self.log_event(f"{previous} has ended their turn\n")

        index = self.active_order.index(previous) if previous in self.active_order else -1
        next_index = (index + 1) % len(self.active_order)
        if next_index == 0:
            self.turn_number += 1
        self.current_competitor_name = self.active_order[next_index]

        conquest_logger.log_game_event(
            'turn_ended', f"{previous} -> {self.current_competitor_name}", self.game_id
        )
        self._notify()

    def done(self) -> None:
        """
        Finish the current turn, clearing the first-turn flag, then play
        automated competitors back to back until a human is up or the game ends.
        """
        self.first_turn = False
        chained = self._automated_chain
        self._automated_chain = True
        try:
            self.pass_turn()
            self._run_automated_turns()
        finally:
            self._automated_chain = chained

    def acknowledge(self) -> None:
        """A human has seen the hand-over; let the waiting automated competitors play."""
        self._run_automated_turns()

    def start_automated_turn(self) -> None:
        self.phase = GamePhase.AUTOMATED_TURN
        self._notify()

    def choose_defenders(self, territory: Territory) -> int:
        """Defending army count for an automated attack, clamped to what the territory can field."""
        limit = CombatEngine.max_defend_dice(territory.army_count)
        defender = self.owner_of(territory)
        if defender is not None and not defender.is_automated and self.defender_prompt is not None:
            chosen = self.defender_prompt.choose_defenders(self, territory)
        else:
            chosen = limit
        return max(1, min(chosen, limit))

    # Snapshots

    def to_dict(self) -> dict:
        """Full state tree, suitable for persistence."""
        return {
            'game_id': self.game_id,
            'phase': self.phase.value,
            'first_turn': self.first_turn,
            'turn_number': self.turn_number,
            'current_competitor': self.current_competitor_name,
            'active_order': list(self.active_order),
            'competitors': [c.to_dict() for c in self.competitors.values()],
            'territories': self.territory_manager.to_dict(),
            'game_log': list(self.game_log)
        }

    def restore(self, snapshot: dict) -> None:
        """
        Replace the whole game state with a snapshot.
        Raises ValueError (pydantic.ValidationError included) and leaves the game untouched if it is malformed.
        """
        data = GameSnapshot.model_validate(snapshot)
        expected = set(self.territory_manager.territories)
        if set(data.territories) != expected:
            missing = sorted(expected - set(data.territories))
            extra = sorted(set(data.territories) - expected)
            raise ValueError(f"Snapshot territories do not match the map (missing {missing}, unknown {extra})")

        self.game_id = data.game_id
        self.competitors = {
            c.name: Competitor(name=c.name, is_automated=c.is_automated, is_eliminated=c.is_eliminated)
            for c in data.competitors
        }
        self.active_order = list(data.active_order)
        self.current_competitor_name = data.current_competitor
        self.phase = data.phase
        self.first_turn = data.first_turn
        self.turn_number = data.turn_number
        self.game_log = list(data.game_log)

        self.territory_manager.clear_ownership()
        for territory_id, entry in data.territories.items():
            territory = self.territory_manager.territories[territory_id]
            self.territory_manager.assign_owner(territory, entry.owner)
            territory.set_army_count(entry.army_count)
        self._notify()

    @classmethod
    def from_dict(cls, snapshot: dict, territory_data: Optional[dict] = None,
                  rng: Optional[random.Random] = None) -> 'GameState':
        game = cls(snapshot.get('game_id'), territory_data, rng)
        game.restore(snapshot)
        return game

    # Internals

    def _resolve(self, territory: TerritoryRef) -> Optional[Territory]:
        if isinstance(territory, Territory):
            return territory
        return self.find_territory(territory)

    def _eliminate(self, name: str) -> None:
        competitor = self.competitors[name]
        competitor.is_eliminated = True
        self.active_order.remove(name)
        self.log_event(f"{name} has lost all their territories! They have been eliminated.\n")
        conquest_logger.log_game_event('player_eliminated', f"{name} has been eliminated", self.game_id)

    def _run_automated_turns(self) -> None:
        chained = self._automated_chain
        self._automated_chain = True
        try:
            while (self.current_competitor is not None and self.current_competitor.is_automated
                   and len(self.active_order) > 1):
                self.policy.take_turn(self)
        finally:
            self._automated_chain = chained
        self._notify()

    def _notify(self) -> None:
        current = self.current_competitor
        if (current is not None and current.is_automated and not self._automated_chain
                and not self.is_game_over
                and self.phase in (GamePhase.PLACE, GamePhase.TURN_COMPLETE)):
            # Automated competitor is up but nobody is driving it yet
            self.phase = GamePhase.AWAITING_HUMAN_ACK
        for observer in list(self._observers):
            observer.on_state_changed(self)

    def log_event(self, event: str) -> None:
        """Add an event to the game log and pass it on to observers."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.game_log.append(f"[{timestamp}] {event}")
        for observer in list(self._observers):
            observer.on_log_line(event)

    def get_game_status(self) -> dict:
        """Get current game status."""
        current = self.current_competitor
        winner = self.winner
        return {
            'game_id': self.game_id,
            'phase': self.phase.value,
            'turn_number': self.turn_number,
            'first_turn': self.first_turn,
            'current_competitor': current.name if current else None,
            'winner': winner.name if winner else None,
            'last_battle': self.last_battle.to_dict() if self.last_battle else None,
            'competitors': [
                {
                    **c.to_dict(),
                    'territory_count': self.territory_count(c.name),
                    'army_count': self.total_armies(c.name),
                    'continent_bonuses': self.territory_manager.get_player_continent_bonuses(c.name)
                }
                for c in self.competitors.values()
            ],
            'created_at': self.created_at.isoformat()
        }
