# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Item model."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict

from services.exceptions import ItemAlreadyPlanted, ItemNotPlanted
from services.randomness.probability_table import Category


@dataclass(frozen=True)
class Item:
    """An owned item produced by a pack opening."""

    item_id: int
    category: Category
    power_value: int
    owner: int
    planted: bool = False
    created_at: int = 0

    def plant(self) -> "Item":
        if self.planted:
            raise ItemAlreadyPlanted(f"Item {self.item_id} is already planted", details={'item_id': self.item_id})
        return replace(self, planted=True)

    def unplant(self) -> "Item":
        if not self.planted:
            raise ItemNotPlanted(f"Item {self.item_id} is not planted", details={'item_id': self.item_id})
        return replace(self, planted=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['category'] = self.category.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        return cls(
            item_id=int(data['item_id']),
            category=Category.parse(data['category']),
            power_value=int(data['power_value']),
            owner=int(data['owner']),
            planted=bool(data.get('planted', False)),
            created_at=int(data.get('created_at', 0)),
        )
