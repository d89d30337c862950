"""
Loot catalog: qualities, item taxonomy, names, attributes, affixes and metadata.

Configuration is keyed by (item_type, subtype) scopes. Either component may be
the empty string, meaning "any type" / "any subtype". Generation consults four
scopes for a concrete (type, subtype), always in this order:

    ("", "")  ->  (type, "")  ->  ("", subtype)  ->  (type, subtype)

Later scopes overwrite earlier ones for same-named attributes, so the order is
part of the behavior.

The catalog has no internal locking. Share one across threads only behind an
external lock.
"""

import copy
import logging
from typing import Any, NamedTuple, Optional

from lootforge.data_models import Affix, Attribute, ItemType

logger = logging.getLogger(__name__)


WILDCARD = ""


class ScopeKey(NamedTuple):
    """A (type, subtype) pair where "" acts as a wildcard."""
    item_type: str
    subtype: str


def resolve_scopes(item_type: str, subtype: str) -> list[ScopeKey]:
    """Return the four lookup scopes for a concrete item, in application order."""
    return [
        ScopeKey(WILDCARD, WILDCARD),
        ScopeKey(item_type, WILDCARD),
        ScopeKey(WILDCARD, subtype),
        ScopeKey(item_type, subtype),
    ]


class LootCatalog:
    """
    Owns all loot configuration for one generation session.

    The catalog is only changed through its setter methods; generation reads
    it and never writes to it. Lookups never raise for missing entries:
    absence comes back as None, an empty collection, or False.

    Usage:
        catalog = LootCatalog()
        catalog.set_quality("common", 100)
        catalog.set_item_type("weapon", 2)
        catalog.set_item_subtype("weapon", "sword", 3)
        catalog.set_item_names("weapon", "sword", ["Iron Sword", "Steel Sword"])
        catalog.set_attribute("weapon", "", Attribute("damage", 5.0, required=True))
    """

    def __init__(self):
        self._qualities: dict[str, int] = {}
        self._item_types: dict[str, ItemType] = {}  # insertion ordered
        self._item_names: dict[ScopeKey, list[str]] = {}
        self._attributes: dict[ScopeKey, list[Attribute]] = {}
        self._prefixes: dict[ScopeKey, list[Affix]] = {}
        self._suffixes: dict[ScopeKey, list[Affix]] = {}
        self._subtype_metadata: dict[ScopeKey, dict[str, Any]] = {}
        # (item_type, subtype, item_name) -> metadata
        self._name_metadata: dict[tuple[str, str, str], dict[str, Any]] = {}

    # =========================================================================
    # QUALITIES
    # =========================================================================

    def set_quality(self, quality: str, weight: int) -> None:
        """Add or replace a quality tier weight."""
        self._qualities[quality] = weight

    def get_quality_data(self) -> dict[str, int]:
        """Get all quality weights."""
        return dict(self._qualities)

    def has_quality(self, quality: str) -> bool:
        """Check if a quality exists. The empty string always matches."""
        if quality == WILDCARD:
            return True
        return quality in self._qualities

    # =========================================================================
    # ITEM TYPES AND SUBTYPES
    # =========================================================================

    def set_item_type(self, type_name: str, weight: int) -> None:
        """Add an item type, or update the weight of an existing one."""
        existing = self._item_types.get(type_name)
        if existing is not None:
            existing.weight = weight
        else:
            self._item_types[type_name] = ItemType(name=type_name, weight=weight)

    def get_item_type(self, type_name: str) -> Optional[ItemType]:
        """Get a copy of an item type, or None if it is not configured."""
        item_type = self._item_types.get(type_name)
        return item_type.copy() if item_type else None

    def get_item_types(self) -> list[ItemType]:
        """Get copies of all item types in insertion order."""
        return [item_type.copy() for item_type in self._item_types.values()]

    def get_item_type_names(self) -> list[str]:
        return list(self._item_types)

    def get_item_type_weights(self) -> dict[str, int]:
        """Get the type -> weight table used for type selection."""
        return {name: item_type.weight for name, item_type in self._item_types.items()}

    def has_item_type(self, type_name: str) -> bool:
        """Check if an item type exists. The empty string always matches."""
        if type_name == WILDCARD:
            return True
        return type_name in self._item_types

    def set_item_subtype(self, type_name: str, subtype: str, weight: int) -> None:
        """
        Add or replace a subtype weight under a type.

        An unknown type is created with weight 0, so it is never picked by
        weighted type selection until its own weight is set.
        """
        item_type = self._item_types.get(type_name)
        if item_type is None:
            item_type = ItemType(name=type_name, weight=0)
            self._item_types[type_name] = item_type
        item_type.add_subtype(subtype, weight)

    def get_subtype_weights(self, type_name: str) -> dict[str, int]:
        """Get the subtype -> weight table for a type ({} if unknown)."""
        item_type = self._item_types.get(type_name)
        return dict(item_type.subtypes) if item_type else {}

    def get_subtypes_for_type(self, type_name: str) -> list[str]:
        return list(self.get_subtype_weights(type_name))

    def has_item_subtype(self, type_name: str, subtype: str) -> bool:
        """Check if a subtype exists under a type. Either wildcard always matches."""
        if type_name == WILDCARD or subtype == WILDCARD:
            return True
        item_type = self._item_types.get(type_name)
        return item_type is not None and item_type.has_subtype(subtype)

    def set_item_type_metadata(self, type_name: str, key: str, value: Any) -> None:
        """Attach a metadata tag to an item type, creating the type if needed."""
        if type_name not in self._item_types:
            self._item_types[type_name] = ItemType(name=type_name, weight=0)
        self._item_types[type_name].set_metadata(key, value)

    # =========================================================================
    # ITEM NAMES
    # =========================================================================

    def set_item_names(self, type_name: str, subtype: str, names: list[str]) -> None:
        """Replace the name list for a (type, subtype)."""
        self._item_names[ScopeKey(type_name, subtype)] = list(names)

    def get_item_names(self, type_name: str, subtype: str) -> list[str]:
        return list(self._item_names.get(ScopeKey(type_name, subtype), []))

    # =========================================================================
    # ATTRIBUTES
    # =========================================================================

    def set_attribute(self, type_name: str, subtype: str, attribute: Attribute) -> None:
        """
        Add an attribute at a scope.

        If an attribute with the same name already exists at exactly this
        scope, the new initial_value is added to it instead of replacing it.
        """
        attributes = self._attributes.setdefault(ScopeKey(type_name, subtype), [])
        for existing in attributes:
            if existing.name == attribute.name:
                existing.initial_value += attribute.initial_value
                return
        attributes.append(attribute.copy())

    def get_attributes(self, type_name: str, subtype: str) -> list[Attribute]:
        """Get copies of the attributes configured at exactly this scope."""
        return [a.copy() for a in self._attributes.get(ScopeKey(type_name, subtype), [])]

    def has_attribute(self, type_name: str, subtype: str, attr_name: str) -> bool:
        """
        Check if an attribute is configured at exactly this scope.

        False when the type or subtype is not configured (wildcards pass).
        """
        if not self.has_item_type(type_name) or not self.has_item_subtype(type_name, subtype):
            return False
        attributes = self._attributes.get(ScopeKey(type_name, subtype), [])
        return any(a.name == attr_name for a in attributes)

    # =========================================================================
    # AFFIXES
    # =========================================================================

    def set_affix_attribute(
        self,
        type_name: str,
        subtype: str,
        is_prefix: bool,
        affix_name: str,
        attribute: Attribute,
    ) -> None:
        """
        Add or replace one attribute of a named prefix/suffix at a scope.

        The affix is created on first use. A same-named attribute already on
        the affix is replaced, not accumulated.
        """
        pools = self._prefixes if is_prefix else self._suffixes
        affixes = pools.setdefault(ScopeKey(type_name, subtype), [])
        for affix in affixes:
            if affix.name == affix_name:
                affix.set_attribute(attribute.copy())
                return
        affixes.append(Affix(name=affix_name, attributes=[attribute.copy()]))

    def set_prefix_attribute(
        self, type_name: str, subtype: str, affix_name: str, attribute: Attribute
    ) -> None:
        self.set_affix_attribute(type_name, subtype, True, affix_name, attribute)

    def set_suffix_attribute(
        self, type_name: str, subtype: str, affix_name: str, attribute: Attribute
    ) -> None:
        self.set_affix_attribute(type_name, subtype, False, affix_name, attribute)

    def get_prefixes(self, type_name: str, subtype: str) -> list[Affix]:
        """Get copies of the prefixes defined at exactly this scope."""
        return [a.copy() for a in self._prefixes.get(ScopeKey(type_name, subtype), [])]

    def get_suffixes(self, type_name: str, subtype: str) -> list[Affix]:
        """Get copies of the suffixes defined at exactly this scope."""
        return [a.copy() for a in self._suffixes.get(ScopeKey(type_name, subtype), [])]

    # =========================================================================
    # METADATA
    # =========================================================================

    def set_subtype_metadata(self, type_name: str, subtype: str, key: str, value: Any) -> None:
        self._subtype_metadata.setdefault(ScopeKey(type_name, subtype), {})[key] = value

    def get_subtype_metadata(self, type_name: str, subtype: str, key: str) -> Optional[Any]:
        return self._subtype_metadata.get(ScopeKey(type_name, subtype), {}).get(key)

    def get_all_subtype_metadata(self, type_name: str, subtype: str) -> dict[str, Any]:
        return dict(self._subtype_metadata.get(ScopeKey(type_name, subtype), {}))

    def set_item_name_metadata(
        self, type_name: str, subtype: str, item_name: str, key: str, value: Any
    ) -> None:
        self._name_metadata.setdefault((type_name, subtype, item_name), {})[key] = value

    def get_item_name_metadata(
        self, type_name: str, subtype: str, item_name: str, key: str
    ) -> Optional[Any]:
        return self._name_metadata.get((type_name, subtype, item_name), {}).get(key)

    def get_all_item_name_metadata(
        self, type_name: str, subtype: str, item_name: str
    ) -> dict[str, Any]:
        return dict(self._name_metadata.get((type_name, subtype, item_name), {}))

    # =========================================================================
    # BULK STATE (used by config import)
    # =========================================================================

    def replace_qualities(self, qualities: dict[str, int]) -> None:
        self._qualities = dict(qualities)

    def replace_item_types(self, item_types: list[ItemType]) -> None:
        self._item_types = {item_type.name: item_type.copy() for item_type in item_types}

    def replace_attributes(self, type_name: str, subtype: str, attributes: list[Attribute]) -> None:
        self._attributes[ScopeKey(type_name, subtype)] = [a.copy() for a in attributes]

    def replace_affixes(
        self, type_name: str, subtype: str, prefixes: list[Affix], suffixes: list[Affix]
    ) -> None:
        key = ScopeKey(type_name, subtype)
        self._prefixes[key] = [a.copy() for a in prefixes]
        self._suffixes[key] = [a.copy() for a in suffixes]

    def replace_subtype_metadata(self, type_name: str, subtype: str, metadata: dict[str, Any]) -> None:
        self._subtype_metadata[ScopeKey(type_name, subtype)] = dict(metadata)

    # =========================================================================
    # SCOPES AND HOUSEKEEPING
    # =========================================================================

    def scopes_for(self, type_name: str, subtype: str) -> list[ScopeKey]:
        """The four scopes consulted for a concrete (type, subtype)."""
        return resolve_scopes(type_name, subtype)

    def clear(self) -> None:
        """Remove all configuration."""
        self.__init__()
        logger.debug("Loot catalog cleared")

    def copy(self) -> "LootCatalog":
        """Deep copy of the catalog."""
        return copy.deepcopy(self)

    def summary(self) -> dict[str, int]:
        """Counts of configured entries, for logging."""
        return {
            "qualities": len(self._qualities),
            "item_types": len(self._item_types),
            "subtypes": sum(len(t.subtypes) for t in self._item_types.values()),
            "name_lists": len(self._item_names),
            "attribute_scopes": len(self._attributes),
            "prefixes": sum(len(a) for a in self._prefixes.values()),
            "suffixes": sum(len(a) for a in self._suffixes.values()),
        }
