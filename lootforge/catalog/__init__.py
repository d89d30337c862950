"""
Loot catalog: qualities, item types, names, attributes and affixes,
keyed by (item type, subtype) scope with "" as the wildcard.
"""

from lootforge.catalog.loot_catalog import LootCatalog, ScopeKey, WILDCARD, resolve_scopes

__all__ = ["LootCatalog", "ScopeKey", "WILDCARD", "resolve_scopes"]
