from typing import Dict, List
from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator, model_validator

MIN_COMPETITORS = 2
MAX_COMPETITORS = 6
MAX_NAME_LENGTH = 15
PLACEHOLDER_NAME = "Name here"


@dataclass
class Competitor:
    name: str
    is_automated: bool = False
    is_eliminated: bool = False

    def to_dict(self) -> dict:
        """Convert competitor to dictionary for serialization."""
        return {
            'name': self.name,
            'is_automated': self.is_automated,
            'is_eliminated': self.is_eliminated
        }


class CompetitorConfig(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH, description="Display name")
    is_automated: bool = Field(False, description="Whether the automated policy plays this seat")

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name cannot be blank")
        if value == PLACEHOLDER_NAME:
            raise ValueError("Enter a name other than the placeholder")
        return value


class Roster(BaseModel):
    """Validated list of competitors in turn order."""

    competitors: List[CompetitorConfig] = Field(
        min_length=MIN_COMPETITORS,
        max_length=MAX_COMPETITORS,
        description="Competitors in turn order (2-6)"
    )

    @model_validator(mode='after')
    def validate_unique_names(self):
        seen = set()
        for competitor in self.competitors:
            key = competitor.name.lower()
            if key in seen:
                raise ValueError(f"Name '{competitor.name}' is already taken")
            seen.add(key)
        return self

    @classmethod
    def from_mapping(cls, names: Dict[str, bool]) -> 'Roster':
        """Build a roster from an ordered name -> is_automated mapping."""
        return cls(competitors=[
            CompetitorConfig(name=name, is_automated=automated)
            for name, automated in names.items()
        ])

    def __len__(self) -> int:
        return len(self.competitors)
