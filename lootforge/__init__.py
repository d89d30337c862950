"""
lootforge - random, level-scaled loot generation.

Load a loot catalog (qualities, item types, names, attributes and affixes)
from TOML or JSON, then generate batches of items from it.
"""

from lootforge.data_models import (
    Affix,
    Attribute,
    GenerationOptions,
    GenerationOverrides,
    Item,
    ItemType,
    LootRoller,
    ScalingMode,
)
from lootforge.catalog.loot_catalog import LootCatalog
from lootforge.content_loader.config_import import ConfigImportError, import_config, load_catalog
from lootforge.items.loot_generator import LootGenerator, generate_loot
from lootforge.tables.weighted_selector import InvalidDataError

__version__ = "0.1.0"

__all__ = [
    # Data models
    "Affix",
    "Attribute",
    "GenerationOptions",
    "GenerationOverrides",
    "Item",
    "ItemType",
    "LootRoller",
    "ScalingMode",
    # Catalog and generation
    "LootCatalog",
    "LootGenerator",
    "generate_loot",
    # Config import
    "import_config",
    "load_catalog",
    # Errors
    "ConfigImportError",
    "InvalidDataError",
]
