"""Crafting blueprints: research, quality levels, copies and a library."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from typing import Optional, Protocol

from spacetrader.item import ItemType

_SECONDS_PER_RESEARCH_POINT = 10.0
_SECONDS_PER_COMPLEXITY = 60.0
_MAX_QUALITY = 5
_COPY_USES = {1: 1, 2: 3, 3: 5, 4: 10, 5: 20}


class Skill(Protocol):
    """What a blueprint needs from a pilot skill."""

    def get_efficiency_bonus(self) -> float: ...

    def get_time_reduction(self) -> float: ...


class BlueprintCategory(Enum):
    SHIP_PART = "Ship Part"
    WEAPON = "Weapon"
    MINING = "Mining Equipment"
    CONSUMABLE = "Consumable"
    SPECIAL = "Special Item"

    def __str__(self) -> str:
        return self.value


class BlueprintType(Enum):
    """Originals can be used without limit; copies have a fixed number of uses."""

    ORIGINAL = "Original"
    COPY = "Copy"


@dataclass(frozen=True)
class BlueprintIngredient:
    item_name: str
    item_type: ItemType
    quantity: int


@dataclass
class Blueprint:
    """A recipe that turns ingredients into an output item."""

    name: str
    description: str
    category: BlueprintCategory
    bp_type: BlueprintType
    ingredients: list[BlueprintIngredient]
    output_item: str
    output_item_type: ItemType
    output_quantity: int
    complexity: int
    mass: int
    remaining_uses: Optional[int] = None
    research_required: int = 0
    research_progress: int = 0
    research_started: bool = False
    research_start_time: Optional[float] = None
    research_complete: bool = False
    quality_level: int = 1
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        category: BlueprintCategory,
        bp_type: BlueprintType,
        ingredients: list[BlueprintIngredient],
        output_item: str,
        output_item_type: ItemType,
        output_quantity: int,
        complexity: int,
        mass: int,
        remaining_uses: Optional[int] = None,
    ) -> Blueprint:
        """Build an unresearched blueprint needing 100 research points per complexity."""
        return cls(
            name=name,
            description=description,
            category=category,
            bp_type=bp_type,
            ingredients=list(ingredients),
            output_item=output_item,
            output_item_type=output_item_type,
            output_quantity=output_quantity,
            complexity=complexity,
            mass=mass,
            remaining_uses=remaining_uses,
            research_required=complexity * 100,
        )

    def start_research(self) -> bool:
        """Begin research on an original; return False if not possible."""
        if self.research_complete or self.research_started or self.bp_type is BlueprintType.COPY:
            return False
        self.research_started = True
        self.research_start_time = time.time()
        return True

    def update_research(self, research_skill: Skill) -> bool:
        """Add progress for time elapsed since the last update; True when just completed."""
        if not self.research_started or self.research_complete or self.research_start_time is None:
            return False
        now = time.time()
        elapsed = now - self.research_start_time
        if elapsed <= 0.0:
            return False

        base_progress = int(elapsed / _SECONDS_PER_RESEARCH_POINT)
        multiplier = 1.0 + research_skill.get_efficiency_bonus()
        self.research_progress += int(base_progress * multiplier)
        self.research_start_time = now

        if self.research_progress >= self.research_required:
            self.research_complete = True
            self.research_started = False
            return True
        return False

    def get_research_progress_percentage(self) -> float:
        if self.research_required == 0:
            return 0.0
        return self.research_progress / self.research_required * 100.0

    def improve_quality(self) -> bool:
        """Raise quality after completed research and restart research at 1.5x cost."""
        if self.quality_level >= _MAX_QUALITY or not self.research_complete:
            return False
        self.quality_level += 1
        self.research_progress = 0
        self.research_started = False
        self.research_complete = False
        self.research_start_time = None
        self.research_required = int(self.research_required * 1.5)
        return True

    def get_crafting_time(self, engineering_skill: Skill) -> timedelta:
        """One minute per complexity, shortened by the skill's time reduction."""
        base = self.complexity * _SECONDS_PER_COMPLEXITY
        adjusted = base * (1.0 - engineering_skill.get_time_reduction())
        return timedelta(seconds=int(adjusted))

    def create_copy(self) -> Optional[Blueprint]:
        """Make a ready-to-use copy of a researched original, or None."""
        if self.bp_type is BlueprintType.COPY or not self.research_complete:
            return None
        return replace(
            self,
            id=str(uuid.uuid4()),
            name=f"{self.name} (Copy)",
            bp_type=BlueprintType.COPY,
            ingredients=list(self.ingredients),
            research_progress=self.research_required,
            research_started=False,
            research_start_time=None,
            research_complete=True,
            remaining_uses=_COPY_USES.get(self.quality_level, 1),
        )

    def use_blueprint(self) -> bool:
        """Consume one use; originals never run out."""
        if self.bp_type is BlueprintType.ORIGINAL:
            return True
        if self.remaining_uses:
            self.remaining_uses -= 1
            return True
        return False


@dataclass
class BlueprintLibrary:
    """A collection of blueprints looked up by id."""

    blueprints: list[Blueprint] = field(default_factory=list)

    def add_blueprint(self, blueprint: Blueprint) -> None:
        self.blueprints.append(blueprint)

    def get_blueprint(self, blueprint_id: str) -> Optional[Blueprint]:
        return next((bp for bp in self.blueprints if bp.id == blueprint_id), None)

    def remove_blueprint(self, blueprint_id: str) -> bool:
        blueprint = self.get_blueprint(blueprint_id)
        if blueprint is None:
            return False
        self.blueprints.remove(blueprint)
        return True

    def update_research(self, research_skill: Skill) -> None:
        """Advance research on every blueprint currently being researched."""
        for blueprint in self.blueprints:
            if blueprint.research_started and not blueprint.research_complete:
                blueprint.update_research(research_skill)