import random

import pytest

from conquest.game.ai_policy import AI_MAX, AI_THRESHOLD, AutomatedPolicy
from conquest.game.errors import PolicyExhaustedError
from conquest.game.phases import GamePhase
from conftest import RecordingObserver, new_game


class ScriptedChoices:
    """Policy random source: scripted action draws, full-budget shares, first candidate."""

    def __init__(self, draws):
        self.draws = list(draws)

    def randrange(self, stop):
        return self.draws.pop(0)

    def randint(self, a, b):
        return b

    def choice(self, seq):
        return seq[0]


class FixedDefence:
    def __init__(self, value):
        self.value = value
        self.calls = 0

    def choose_defenders(self, game, territory):
        self.calls += 1
        return self.value


def test_probability_constants():
    assert (AI_MAX, AI_THRESHOLD) == (20, 16)


def test_reinforcements_include_continent_bonus():
    game = new_game({"Ann": False, "Ben": False})
    manager = game.territory_manager
    for territory in manager.get_all_territories():
        manager.assign_owner(territory, "Ben")
    for territory_id in ["NA1", "NA2", "NA3", "NA4", "NA5"]:
        manager.assign_owner(manager.find_territory(territory_id), "Ann")
    assert game.calculate_reinforcements("Ann") == 3

    for territory in manager.get_territories_by_continent("AU"):
        manager.assign_owner(territory, "Ann")
    assert game.calculate_reinforcements("Ann") == 3 + 2

    for territory in manager.get_territories_by_continent("SA"):
        manager.assign_owner(territory, "Ann")
    assert game.calculate_reinforcements("Ann") == 13 // 3 + 2 + 2


def test_placement_spends_whole_budget_on_frontier():
    game = new_game({"Bot": True, "Ben": False}, seed=9)
    policy = AutomatedPolicy(random.Random(4))
    frontier = {t.territory_id for t in game.territory_manager.land_with_adjacent_enemy("Bot")}

    allocation = policy.plan_placement(game, "Bot")

    assert sum(allocation.values()) == game.calculate_reinforcements("Bot")
    assert all(count >= 1 for count in allocation.values())
    assert set(allocation) <= frontier


def test_placement_without_frontier_is_fatal():
    game = new_game({"Bot": True, "Ben": False})
    for territory in game.territory_manager.get_all_territories():
        game.territory_manager.assign_owner(territory, "Bot")

    with pytest.raises(PolicyExhaustedError):
        AutomatedPolicy(random.Random(1)).plan_placement(game, "Bot")


def test_stop_draw_places_then_ends_first_turn():
    game = new_game({"Bot": True, "Human": False})
    observer = RecordingObserver()
    game.add_observer(observer)
    game.policy.rng = ScriptedChoices([AI_THRESHOLD])
    budget = game.calculate_reinforcements("Bot")
    armies_before = game.total_armies("Bot")

    game.begin()

    assert game.total_armies("Bot") == armies_before + budget
    assert game.current_competitor.name == "Human"
    assert game.is_first_turn is False
    assert game.phase == GamePhase.TURN_COMPLETE
    assert GamePhase.AUTOMATED_TURN in observer.phases
    assert not any("is attacking" in line for line in observer.lines)


def test_move_draw_moves_and_ends_turn():
    game = new_game({"Bot": True, "Human": False})
    alaska, alberta = game.find_territory("NA1"), game.find_territory("NA2")
    game.territory_manager.assign_owner(alaska, "Bot")
    game.territory_manager.assign_owner(alberta, "Bot")
    alaska.set_army_count(5)
    game.policy.rng = ScriptedChoices([AI_MAX - 1])
    armies_before = game.total_armies("Bot") + game.calculate_reinforcements("Bot")

    game.begin()

    assert game.total_armies("Bot") == armies_before
    assert game.current_competitor.name == "Human"
    assert game.is_first_turn is False
    assert any("has moved" in line for line in game.game_log)


def test_attack_draw_attacks_then_stops():
    game = new_game({"Bot": True, "Human": False}, seed=21)
    observer = RecordingObserver()
    game.add_observer(observer)
    game.policy.rng = ScriptedChoices([0, AI_THRESHOLD])
    armies_before = game.total_armies("Bot") + game.calculate_reinforcements("Bot")

    game.begin()

    assert any("is attacking" in line for line in observer.lines)
    assert game.total_armies("Bot") <= armies_before
    assert game.current_competitor.name == "Human"
    for territory in game.territory_manager.get_all_territories():
        assert territory.army_count >= 1


def test_human_defender_is_prompted_and_clamped():
    game = new_game({"Bot": True, "Human": False})
    prompt = FixedDefence(7)
    game.set_defender_prompt(prompt)
    human_land = game.territories_of("Human")[0]

    human_land.set_army_count(5)
    assert game.choose_defenders(human_land) == 2
    human_land.set_army_count(1)
    assert game.choose_defenders(human_land) == 1
    assert prompt.calls == 2

    bot_land = game.territories_of("Bot")[0]
    bot_land.set_army_count(4)
    assert game.choose_defenders(bot_land) == 2
    assert prompt.calls == 2


def test_automated_game_runs_to_a_winner():
    game = new_game({"Red": True, "Blue": True}, seed=13)

    game.begin()

    assert game.is_game_over is True
    winner = game.winner
    assert winner is not None
    assert game.territory_count(winner.name) == 42
    assert all(t.army_count >= 1 for t in game.territory_manager.get_all_territories())
