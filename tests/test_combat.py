import random

import pytest

from conquest.game.combat import CombatEngine
from conftest import FixedDice


@pytest.mark.parametrize("attacker,defender,expected", [
    ([6, 6, 6], [6, 6], (2, 0)),   # ties go to the defender
    ([6, 5], [5, 4], (0, 2)),
    ([6, 3], [5, 4], (1, 1)),
    ([6, 5, 4], [3], (0, 1)),      # unpaired attacker dice are ignored
    ([2], [6, 1], (1, 0)),         # unpaired defender dice are ignored
    ([1], [1], (1, 0)),
])
def test_resolve_combat(attacker, defender, expected):
    assert CombatEngine.resolve_combat(attacker, defender) == expected


def test_roll_dice_sorts_highest_first():
    assert CombatEngine.roll_dice(3, FixedDice([2, 6, 4])) == [6, 4, 2]


def test_resolve_battle_tie_rolls_credit_defender():
    result = CombatEngine.resolve_battle(3, 2, FixedDice([3, 3, 3, 3, 3]))

    assert result.attacker_dice == [3, 3, 3]
    assert result.defender_dice == [3, 3]
    assert result.attacker_losses == 2
    assert result.defender_losses == 0


def test_resolve_battle_losses_never_exceed_pairs():
    rng = random.Random(11)
    for attackers in range(1, 4):
        for defenders in range(1, 3):
            result = CombatEngine.resolve_battle(attackers, defenders, rng)
            assert len(result.attacker_dice) == attackers
            assert len(result.defender_dice) == defenders
            assert result.attacker_losses + result.defender_losses == min(attackers, defenders)
            assert all(1 <= die <= 6 for die in result.attacker_dice + result.defender_dice)


@pytest.mark.parametrize("armies,attack,defend", [
    (1, 0, 1),
    (2, 1, 2),
    (3, 2, 2),
    (4, 3, 2),
    (10, 3, 2),
])
def test_dice_caps(armies, attack, defend):
    assert CombatEngine.max_attack_dice(armies) == attack
    assert CombatEngine.max_defend_dice(armies) == defend
