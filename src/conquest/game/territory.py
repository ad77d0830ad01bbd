import json
import os
import re
from typing import Dict, List, Optional
from dataclasses import dataclass, field

# Two-letter continent code followed by a 1-based index, e.g. "NA1"
TERRITORY_ID_PATTERN = re.compile(r"([A-Za-z]{2})([0-9]+)")

_territory_data_cache: Optional[dict] = None


def load_territory_data() -> dict:
    """Load the fixed world map from the bundled JSON file."""
    global _territory_data_cache
    if _territory_data_cache is None:
        current_dir = os.path.dirname(os.path.dirname(__file__))
        territory_file = os.path.join(current_dir, 'data', 'territories.json')
        with open(territory_file, 'r', encoding='utf-8') as f:
            _territory_data_cache = json.load(f)
    return _territory_data_cache


@dataclass
class Territory:
    name: str
    territory_id: str
    continent: str
    adjacent_territories: List[str]
    army_count: int = 0

    def can_attack_from(self) -> bool:
        """Check if this territory can launch attacks (has more than 1 army)."""
        return self.army_count > 1

    def add_army(self, count: int) -> None:
        """Add armies to this territory."""
        self.army_count += count

    def remove_army(self, count: int) -> bool:
        """
        Remove armies from this territory.
        Fails (returns False, count unchanged) if fewer than 1 army would remain.
        """
        if self.army_count - count < 1:
            return False
        self.army_count -= count
        return True

    def set_army_count(self, count: int) -> None:
        self.army_count = count

    def __str__(self) -> str:
        return f"{self.territory_id}: {self.name} ({self.army_count} armies)"


@dataclass
class Continent:
    code: str
    name: str
    bonus: int
    territory_ids: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.territory_ids)


class TerritoryManager:
    """
    Owns every territory and continent, plus the ownership index.

    Ownership lives in one place: ``_owners`` maps territory ID to competitor
    name, and ``_holdings`` is the reverse index kept in step with it by
    ``assign_owner``. Nothing else writes either mapping.
    """

    def __init__(self, territory_data: Optional[dict] = None):
        if territory_data is None:
            territory_data = load_territory_data()

        self.territories: Dict[str, Territory] = {}
        self.continents: Dict[str, Continent] = {}
        self._owners: Dict[str, str] = {}
        self._holdings: Dict[str, List[str]] = {}

        for code, data in territory_data['continents'].items():
            continent = Continent(
                code=code,
                name=data['name'],
                bonus=data['bonus'],
                territory_ids=list(data['territories'])
            )
            self.continents[code] = continent
            for territory_id in continent.territory_ids:
                entry = territory_data['territories'][territory_id]
                self.territories[territory_id] = Territory(
                    name=entry['name'],
                    territory_id=territory_id,
                    continent=code,
                    adjacent_territories=list(entry['adjacent'])
                )

    def find_territory(self, territory_id) -> Optional[Territory]:
        """
        Look a territory up by its full ID.
        Returns None for malformed IDs, unknown continents and out-of-range indexes.
        """
        if not isinstance(territory_id, str):
            return None
        match = TERRITORY_ID_PATTERN.fullmatch(territory_id)
        if not match:
            return None

        continent = self.continents.get(match.group(1))
        if continent is None:
            return None

        index = int(match.group(2))
        if index < 1 or index > continent.size:
            return None
        return self.territories[continent.territory_ids[index - 1]]

    def get_all_territories(self) -> List[Territory]:
        """Get all territories."""
        return list(self.territories.values())

    def get_territories_by_continent(self, continent: str) -> List[Territory]:
        """Get all territories in a continent."""
        entry = self.continents.get(continent)
        if entry is None:
            return []
        return [self.territories[t_id] for t_id in entry.territory_ids]

    # Ownership index

    def owner_of(self, territory: Territory) -> Optional[str]:
        return self._owners.get(territory.territory_id)

    def assign_owner(self, territory: Territory, owner: str) -> Optional[str]:
        """
        Give a territory to a competitor, keeping both indexes consistent.
        Returns the previous owner, if any.
        """
        territory_id = territory.territory_id
        previous = self._owners.get(territory_id)
        if previous == owner:
            return previous

        if previous is not None:
            self._holdings[previous].remove(territory_id)
        self._owners[territory_id] = owner
        self._holdings.setdefault(owner, []).append(territory_id)
        return previous

    def clear_ownership(self) -> None:
        """Forget every owner; used before a snapshot is restored."""
        self._owners.clear()
        self._holdings.clear()

    def get_territories_by_owner(self, owner: str) -> List[Territory]:
        """Get all territories owned by a competitor, in the order they were acquired."""
        return [self.territories[t_id] for t_id in self._holdings.get(owner, [])]

    def count_owned(self, owner: str) -> int:
        return len(self._holdings.get(owner, []))

    # Adjacency queries

    def adjacent_enemies(self, territory: Territory) -> List[Territory]:
        """Neighbours of a territory held by someone other than its owner."""
        owner = self.owner_of(territory)
        return [
            self.territories[t_id] for t_id in territory.adjacent_territories
            if self._owners.get(t_id) != owner
        ]

    def adjacent_friendlies(self, territory: Territory) -> List[Territory]:
        """Neighbours of a territory held by its own owner."""
        owner = self.owner_of(territory)
        return [
            self.territories[t_id] for t_id in territory.adjacent_territories
            if self._owners.get(t_id) == owner
        ]

    def land_with_adjacent_enemy(self, owner: str) -> List[Territory]:
        return [t for t in self.get_territories_by_owner(owner) if self.adjacent_enemies(t)]

    def land_with_adjacent_friendly(self, owner: str) -> List[Territory]:
        return [t for t in self.get_territories_by_owner(owner) if self.adjacent_friendlies(t)]

    # Continents

    def get_continent_bonus(self, continent: str) -> int:
        """Get the army bonus for controlling a continent."""
        entry = self.continents.get(continent)
        return entry.bonus if entry else 0

    def sole_conqueror(self, continent: str) -> Optional[str]:
        """Return the competitor holding every territory of a continent, or None."""
        entry = self.continents.get(continent)
        if entry is None:
            return None
        owners = {self._owners.get(t_id) for t_id in entry.territory_ids}
        if len(owners) == 1:
            return owners.pop()
        return None

    def player_controls_continent(self, owner: str, continent: str) -> bool:
        """Check if a competitor controls all territories in a continent."""
        return self.sole_conqueror(continent) == owner

    def get_player_continent_bonuses(self, owner: str) -> Dict[str, int]:
        """Get all continent bonuses for a competitor."""
        bonuses = {}
        for code, continent in self.continents.items():
            if self.player_controls_continent(owner, code):
                bonuses[continent.name] = continent.bonus
        return bonuses

    def to_dict(self) -> dict:
        """Convert territory state (owner and armies) to a dictionary."""
        return {
            territory_id: {
                'owner': self._owners.get(territory_id),
                'army_count': territory.army_count
            }
            for territory_id, territory in self.territories.items()
        }
