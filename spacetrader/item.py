"""Items, their categories and a weight-limited inventory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ResourceType(Enum):
    """Where a raw resource comes from."""

    MINERAL = "Mineral"
    GAS = "Gas"
    ICE = "Ice"
    LUNAR = "Lunar"
    STELLAR = "Stellar"
    EXOTIC = "Exotic"
    REFINED = "Refined"


class ItemCategory(Enum):
    """Broad kind of an item."""

    RESOURCE = "Resource"
    COMPONENT = "Component"
    PRODUCT = "Product"
    BLUEPRINT = "Blueprint"
    EQUIPMENT = "Equipment"
    SHIP_MODULE = "ShipModule"
    FUEL = "Fuel"


@dataclass(frozen=True)
class ItemType:
    """An item category; resources also carry their resource type."""

    category: ItemCategory
    resource: Optional[ResourceType] = None

    def __post_init__(self) -> None:
        if (self.category is ItemCategory.RESOURCE) != (self.resource is not None):
            raise ValueError("a resource type is required for, and only for, resources")

    @classmethod
    def of_resource(cls, resource: ResourceType) -> ItemType:
        return cls(ItemCategory.RESOURCE, resource)

    def __str__(self) -> str:
        if self.resource is not None:
            return f"{self.category.value}({self.resource.value})"
        return self.category.value


@dataclass(frozen=True)
class Item:
    """A tradeable item: value in credits, weight in cargo units."""

    name: str
    value: int
    weight: int
    item_type: ItemType


@dataclass
class Inventory:
    """Item quantities whose total weight may not exceed ``capacity``."""

    capacity: int
    items: dict[Item, int] = field(default_factory=dict)

    def add_item(self, item: Item, quantity: int) -> bool:
        """Add items if they fit; return whether they were added."""
        if self.used_capacity() + item.weight * quantity > self.capacity:
            return False
        self.items[item] = self.items.get(item, 0) + quantity
        return True

    def _find(self, item_name: str) -> Optional[Item]:
        return next((item for item in self.items if item.name == item_name), None)

    def remove_item(self, item_name: str, quantity: int) -> Optional[Item]:
        """Remove items by name; return the item, or None if too few are held."""
        item = self._find(item_name)
        if item is None or self.items[item] < quantity:
            return None
        remaining = self.items[item] - quantity
        if remaining == 0:
            del self.items[item]
        else:
            self.items[item] = remaining
        return item

    def has_item(self, item_name: str, quantity: int) -> bool:
        """Return True if at least ``quantity`` of the named item is held."""
        return any(item.name == item_name and held >= quantity for item, held in self.items.items())

    def get_item_quantity(self, item_name: str) -> int:
        """Return how many of the named item are held."""
        item = self._find(item_name)
        return self.items[item] if item is not None else 0

    def used_capacity(self) -> int:
        """Return the total weight of everything held."""
        return sum(item.weight * quantity for item, quantity in self.items.items())

    def remaining_capacity(self) -> int:
        """Return how much weight can still be added."""
        return self.capacity - self.used_capacity()