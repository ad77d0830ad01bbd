"""
Turn phases as plain data.

The engine only records the phase; collaborators read ``PHASE_ACTIONS`` to
decide which controls to offer.
"""

from enum import Enum
from typing import Dict, Tuple


class GamePhase(Enum):
    PLACE = "place"
    ATTACK = "attack"
    AUTOMATED_TURN = "automated_turn"
    TURN_COMPLETE = "turn_complete"
    AWAITING_HUMAN_ACK = "awaiting_human_ack"


PLACE = "place"
ATTACK = "attack"
MOVE = "move"
DONE = "done"
ACKNOWLEDGE = "acknowledge"

# Phase each action leaves the game in
ACTION_RESULTS: Dict[str, GamePhase] = {
    PLACE: GamePhase.PLACE,
    ATTACK: GamePhase.ATTACK,
    MOVE: GamePhase.TURN_COMPLETE,
    DONE: GamePhase.TURN_COMPLETE,
    ACKNOWLEDGE: GamePhase.AUTOMATED_TURN,
}

# Actions a collaborator may offer in each phase
PHASE_ACTIONS: Dict[GamePhase, Tuple[str, ...]] = {
    GamePhase.PLACE: (PLACE, ATTACK, MOVE, DONE),
    GamePhase.ATTACK: (ATTACK, MOVE, DONE),
    GamePhase.TURN_COMPLETE: (PLACE,),
    GamePhase.AUTOMATED_TURN: (),
    GamePhase.AWAITING_HUMAN_ACK: (ACKNOWLEDGE,),
}
