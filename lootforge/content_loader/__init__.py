"""Catalog config import, item export and the built-in demo catalog."""

from lootforge.content_loader.config_import import (
    AffixEntry,
    AttributeEntry,
    ConfigDocument,
    ConfigImportError,
    ConfigSource,
    ImportResult,
    NameListEntry,
    apply_document,
    import_config,
    load_catalog,
    parse_document,
    read_document,
)
from lootforge.content_loader.item_export import (
    ItemDecodeError,
    items_from_dicts,
    items_from_json,
    items_to_dicts,
    items_to_json,
    load_items,
    save_items,
)
from lootforge.content_loader.demo_catalog import build_demo_catalog

__all__ = [
    # Config import
    "AffixEntry",
    "AttributeEntry",
    "ConfigDocument",
    "ConfigImportError",
    "ConfigSource",
    "ImportResult",
    "NameListEntry",
    "apply_document",
    "import_config",
    "load_catalog",
    "parse_document",
    "read_document",
    # Item export
    "ItemDecodeError",
    "items_from_dicts",
    "items_from_json",
    "items_to_dicts",
    "items_to_json",
    "load_items",
    "save_items",
    # Demo data
    "build_demo_catalog",
]
