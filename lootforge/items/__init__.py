"""
Item generation for lootforge.

This module provides:
- AttributeScaler: Level-based linear or exponential attribute scaling
- ItemAssembler: Builds one item from a catalog and generation options
- LootGenerator: Generation sessions storing batches by key
"""

from lootforge.items.attribute_scaler import AttributeScaler, scale_attribute
from lootforge.items.item_assembler import ItemAssembler
from lootforge.items.loot_generator import DEFAULT_LOOT_KEY, LootGenerator, generate_loot

__all__ = [
    "AttributeScaler",
    "scale_attribute",
    "ItemAssembler",
    "DEFAULT_LOOT_KEY",
    "LootGenerator",
    "generate_loot",
]
