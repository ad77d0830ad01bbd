from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from .phases import GamePhase
from .player import MAX_NAME_LENGTH


class CompetitorSnapshot(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    is_automated: bool = False
    is_eliminated: bool = False


class TerritorySnapshot(BaseModel):
    owner: str
    army_count: int = Field(ge=1, description="Owned territories hold at least one army")


class GameSnapshot(BaseModel):
    """Complete state tree of a game, as produced by ``GameState.to_dict``."""

    game_id: str
    phase: GamePhase
    first_turn: bool
    turn_number: int = Field(ge=1)
    current_competitor: Optional[str] = None
    active_order: List[str]
    competitors: List[CompetitorSnapshot]
    territories: Dict[str, TerritorySnapshot]
    game_log: List[str] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_references(self):
        names = [c.name for c in self.competitors]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate competitor names: {names}")
        if len(set(self.active_order)) != len(self.active_order):
            raise ValueError(f"Duplicate active competitors: {self.active_order}")

        unknown = [name for name in self.active_order if name not in names]
        if unknown:
            raise ValueError(f"Active competitors not in roster: {unknown}")

        if self.current_competitor is not None and self.current_competitor not in self.active_order:
            raise ValueError(f"Current competitor '{self.current_competitor}' is not active")

        active = set(self.active_order)
        for territory_id, territory in self.territories.items():
            if territory.owner not in active:
                raise ValueError(f"{territory_id} is owned by inactive competitor '{territory.owner}'")

        # Active competitors are exactly the ones still holding land
        landless = active - {t.owner for t in self.territories.values()}
        if landless:
            raise ValueError(f"Active competitors own no territory: {sorted(landless)}")
        return self
