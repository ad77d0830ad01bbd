import random
from typing import List, Optional, Tuple
from dataclasses import dataclass

DIE_FACES = 6
MAX_ATTACK_DICE = 3
MAX_DEFEND_DICE = 2


@dataclass
class CombatResult:
    attacker_losses: int
    defender_losses: int
    attacker_dice: List[int]
    defender_dice: List[int]
    territory_conquered: bool = False

    def to_dict(self) -> dict:
        """Dice and losses per side, for status reports."""
        return {
            'attacker': {'dice': list(self.attacker_dice), 'losses': self.attacker_losses},
            'defender': {'dice': list(self.defender_dice), 'losses': self.defender_losses},
            'conquered': self.territory_conquered
        }


class CombatEngine:
    """Handles dice rolling and battle resolution. Holds no game state."""

    @staticmethod
    def roll_dice(count: int, rng: Optional[random.Random] = None) -> List[int]:
        """Roll the specified number of dice and return sorted results (highest first)."""
        rng = rng or random
        dice = [rng.randint(1, DIE_FACES) for _ in range(count)]
        return sorted(dice, reverse=True)

    @staticmethod
    def max_attack_dice(army_count: int) -> int:
        """Most armies a territory may commit to an attack (always leaves one behind)."""
        return max(0, min(army_count - 1, MAX_ATTACK_DICE))

    @staticmethod
    def max_defend_dice(army_count: int) -> int:
        """Most armies a territory may defend with."""
        return max(0, min(army_count, MAX_DEFEND_DICE))

    @staticmethod
    def resolve_combat(attacker_dice: List[int], defender_dice: List[int]) -> Tuple[int, int]:
        """
        Resolve combat between attacker and defender dice, both sorted highest first.
        Ties go to the defender; unpaired dice are ignored.
        Returns (attacker_losses, defender_losses).
        """
        attacker_losses = 0
        defender_losses = 0

        # Compare dice in pairs, highest vs highest
        comparisons = min(len(attacker_dice), len(defender_dice))

        for i in range(comparisons):
            if attacker_dice[i] > defender_dice[i]:
                defender_losses += 1
            else:
                attacker_losses += 1

        return attacker_losses, defender_losses

    @classmethod
    def resolve_battle(cls, attacker_armies: int, defender_armies: int,
                       rng: Optional[random.Random] = None) -> CombatResult:
        """
        Roll one die per committed unit on each side and resolve the pairs.
        Callers cap the counts (3 attacking, 2 defending); no range checks here.
        """
        attacker_dice = cls.roll_dice(attacker_armies, rng)
        defender_dice = cls.roll_dice(defender_armies, rng)

        attacker_losses, defender_losses = cls.resolve_combat(attacker_dice, defender_dice)

        return CombatResult(
            attacker_losses=attacker_losses,
            defender_losses=defender_losses,
            attacker_dice=attacker_dice,
            defender_dice=defender_dice
        )

    @staticmethod
    def format_rolls(attacker_name: str, from_territory: str, to_territory: str,
                     result: CombatResult) -> List[str]:
        """Format the opening lines of a battle for the action log."""
        return [
            f"{attacker_name} is attacking {to_territory} with {from_territory}!",
            f"Attacker rolled {len(result.attacker_dice)} dice: {result.attacker_dice}",
            f"Defender rolled {len(result.defender_dice)} dice: {result.defender_dice}\n",
        ]
