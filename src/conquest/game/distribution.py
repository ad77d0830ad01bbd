"""
Initial allocation of territories and armies.

Every competitor receives a random share of the 42 territories and a fixed
army budget (by competitor count) spread over them at random, with at least
one army on every territory.
"""

import random
from typing import Dict, List, Sequence

from .territory import TerritoryManager

# Starting army points per competitor, keyed by competitor count
STARTING_ARMIES = {2: 50, 3: 35, 4: 30, 5: 25}
DEFAULT_STARTING_ARMIES = 20

# Territory counts that keep all 42 territories allocated
EVEN_SPLITS = {2: 21, 3: 14}
UNEVEN_SPLITS = {4: [10, 10, 11, 11], 5: [9, 9, 8, 8, 8]}
DEFAULT_TERRITORIES_PER_COMPETITOR = 7


def starting_armies(num_competitors: int) -> int:
    """Total army points each competitor starts with."""
    return STARTING_ARMIES.get(num_competitors, DEFAULT_STARTING_ARMIES)


def territory_counts(num_competitors: int, rng: random.Random) -> List[int]:
    """Number of territories each competitor receives, in roster order."""
    if num_competitors in EVEN_SPLITS:
        return [EVEN_SPLITS[num_competitors]] * num_competitors
    if num_competitors in UNEVEN_SPLITS:
        counts = list(UNEVEN_SPLITS[num_competitors])
        rng.shuffle(counts)
        return counts
    return [DEFAULT_TERRITORIES_PER_COMPETITOR] * num_competitors


def random_partition(total: int, parts: int, rng: random.Random) -> List[int]:
    """
    Split ``total`` into ``parts`` random non-negative integers summing to ``total``.

    Stick-breaking: draw parts - 1 cut points uniformly in [0, total], sort
    them, and take the gaps between consecutive cuts (the last gap runs from
    the largest cut to ``total``).
    """
    if parts < 1:
        raise ValueError(f"Cannot partition into {parts} parts")
    if total < 0:
        raise ValueError(f"Cannot partition a negative total ({total})")

    cuts = sorted(rng.randint(0, total) for _ in range(parts - 1))
    partition = []
    previous = 0
    for cut in cuts:
        partition.append(cut - previous)
        previous = cut
    partition.append(total - previous)
    return partition


def distribute(territory_manager: TerritoryManager, competitor_names: Sequence[str],
               rng: random.Random) -> Dict[str, List[str]]:
    """
    Partition every territory and each competitor's starting armies.

    Territories must be unowned with zero armies. Returns the territory IDs
    handed to each competitor, in assignment order.
    """
    num_competitors = len(competitor_names)
    pool = [
        territory_id
        for continent in territory_manager.continents.values()
        for territory_id in continent.territory_ids
    ]
    rng.shuffle(pool)

    counts = territory_counts(num_competitors, rng)
    if sum(counts) > len(pool):
        raise ValueError(f"Cannot distribute {len(pool)} territories among {num_competitors} competitors")

    total_armies = starting_armies(num_competitors)
    allocation: Dict[str, List[str]] = {}

    for name, count in zip(competitor_names, counts):
        owned = [pool.pop() for _ in range(count)]
        armies = [value + 1 for value in random_partition(total_armies - count, count, rng)]

        for territory_id, army_count in zip(owned, armies):
            territory = territory_manager.territories[territory_id]
            territory_manager.assign_owner(territory, name)
            territory.add_army(army_count)

        allocation[name] = owned

    return allocation
