"""
Loot catalog import from declarative documents.

Accepts a parsed mapping, TOML text, JSON text, or a path to a .toml/.json
file. Document layout (TOML shown):

    [quality_data]
    common = 100
    rare = 30

    [[item_types]]
    item_type = "weapon"
    weight = 2
    [item_types.subtypes]
    sword = 3

    [[item_attributes]]
    item_type = "weapon"
    subtype = ""
    [[item_attributes.attributes]]
    name = "damage"
    initial_value = 5.0
    min = 1.0
    max = 10.0
    required = true

    [[item_list]]
    item_type = "weapon"
    subtype = "sword"
    names = ["Iron Sword", "Steel Sword"]

    [[item_affixes]]
    item_type = "weapon"
    subtype = ""
    [[item_affixes.prefixes]]
    name = "Flaming"
    ...

The whole document is parsed and validated before the catalog is touched, so
a malformed document never leaves a half-applied catalog behind.
"""

import json
import logging
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional, Union, TYPE_CHECKING

from lootforge.catalog.loot_catalog import LootCatalog
from lootforge.data_models import Affix, Attribute, ItemType

if TYPE_CHECKING:
    from lootforge.observability.run_log import RunLog

logger = logging.getLogger(__name__)


ConfigSource = Union[dict[str, Any], str, Path]


class ConfigImportError(ValueError):
    """Raised when a config document cannot be parsed or validated."""

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"Invalid loot config ({source}): {message}")


# =============================================================================
# PARSED DOCUMENT
# =============================================================================


@dataclass
class AttributeEntry:
    item_type: str
    subtype: str
    attributes: list[Attribute] = field(default_factory=list)


@dataclass
class NameListEntry:
    item_type: str
    subtype: str
    names: list[str] = field(default_factory=list)
    item_metadata: dict[str, dict[str, Any]] = field(default_factory=dict)


@dataclass
class AffixEntry:
    item_type: str
    subtype: str
    prefixes: list[Affix] = field(default_factory=list)
    suffixes: list[Affix] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConfigDocument:
    """A fully validated config document, ready to apply to a catalog."""
    quality_data: dict[str, int]
    item_types: list[ItemType] = field(default_factory=list)
    item_attributes: list[AttributeEntry] = field(default_factory=list)
    item_list: list[NameListEntry] = field(default_factory=list)
    item_affixes: list[AffixEntry] = field(default_factory=list)


@dataclass
class ImportResult:
    """Counts of what an import applied."""
    source: str
    qualities: int = 0
    item_types: int = 0
    attribute_scopes: int = 0
    name_lists: int = 0
    affix_scopes: int = 0

    def counts(self) -> dict[str, int]:
        return {
            "qualities": self.qualities,
            "item_types": self.item_types,
            "attribute_scopes": self.attribute_scopes,
            "name_lists": self.name_lists,
            "affix_scopes": self.affix_scopes,
        }


# =============================================================================
# READING
# =============================================================================


def read_document(source: ConfigSource) -> tuple[dict[str, Any], str]:
    """
    Turn a source into a raw mapping.

    A single-line string ending in .toml or .json is read as a file path;
    other strings are treated as TOML unless they look like a JSON object. Paths are
    read by suffix (.json as JSON, anything else as TOML).

    Returns:
        Tuple of (raw mapping, source label for messages)

    Raises:
        ConfigImportError: If the source cannot be read or parsed
    """
    if isinstance(source, dict):
        return source, "<dict>"

    if isinstance(source, Path):
        label = str(source)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigImportError(label, f"cannot read file: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigImportError(label, f"file is not valid UTF-8: {e}") from e
        return _parse_text(text, label, as_json=source.suffix.lower() == ".json"), label

    if isinstance(source, str) and _looks_like_path(source):
        return read_document(Path(source.strip()))

    if isinstance(source, str):
        return _parse_text(source, "<text>", as_json=source.lstrip().startswith("{")), "<text>"

    raise ConfigImportError("<unknown>", f"unsupported source type {type(source).__name__}")


def _looks_like_path(text: str) -> bool:
    # No single-line TOML or JSON document can end in a file suffix
    text = text.strip()
    return "\n" not in text and text.lower().endswith((".toml", ".json"))


def _parse_text(text: str, label: str, as_json: bool) -> dict[str, Any]:
    if as_json:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigImportError(label, f"JSON parse error: {e}") from e
    else:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ConfigImportError(label, f"TOML parse error: {e}") from e
    if not isinstance(data, dict):
        raise ConfigImportError(label, "top level must be a table/object")
    return data


# =============================================================================
# VALIDATION
# =============================================================================


def parse_document(data: dict[str, Any], source: str = "<dict>") -> ConfigDocument:
    """
    Validate a raw mapping into a ConfigDocument.

    Raises:
        ConfigImportError: On any missing or mistyped field
    """
    if "quality_data" not in data:
        raise ConfigImportError(source, "missing required table 'quality_data'")

    try:
        return ConfigDocument(
            quality_data=_weight_table(data["quality_data"], "quality_data"),
            item_types=[
                _parse_item_type(entry, f"item_types[{i}]")
                for i, entry in enumerate(_list_of_tables(data.get("item_types", []), "item_types"))
            ],
            item_attributes=[
                _parse_attribute_entry(entry, f"item_attributes[{i}]")
                for i, entry in enumerate(
                    _list_of_tables(data.get("item_attributes", []), "item_attributes")
                )
            ],
            item_list=[
                _parse_name_list(entry, f"item_list[{i}]")
                for i, entry in enumerate(_list_of_tables(data.get("item_list", []), "item_list"))
            ],
            item_affixes=[
                _parse_affix_entry(entry, f"item_affixes[{i}]")
                for i, entry in enumerate(
                    _list_of_tables(data.get("item_affixes", []), "item_affixes")
                )
            ],
        )
    except (KeyError, TypeError, ValueError) as e:
        if isinstance(e, ConfigImportError):
            raise
        detail = f"missing field {e}" if isinstance(e, KeyError) else str(e)
        raise ConfigImportError(source, detail) from e


def _list_of_tables(value: Any, label: str) -> list[dict[str, Any]]:
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise TypeError(f"{label} must be a list of tables")
    return value


def _weight_table(value: Any, label: str) -> dict[str, int]:
    if not isinstance(value, dict):
        raise TypeError(f"{label} must be a table of name = weight")
    weights: dict[str, int] = {}
    for name, weight in value.items():
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise TypeError(f"{label}.{name} must be an integer weight, got {weight!r}")
        weights[str(name)] = weight
    return weights


def _string(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{label} must be a string, got {value!r}")
    return value


def _table(value: Any, label: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{label} must be a table")
    return dict(value)


def _metadata_table(value: Any, label: str) -> dict[str, Any]:
    """A metadata table with every value made JSON-representable."""
    return {str(key): _json_value(v, f"{label}.{key}") for key, v in _table(value, label).items()}


def _json_value(value: Any, label: str) -> Any:
    # TOML dates and times are kept as ISO 8601 strings
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): _json_value(v, f"{label}.{key}") for key, v in value.items()}
    if isinstance(value, list):
        return [_json_value(v, f"{label}[{i}]") for i, v in enumerate(value)]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise TypeError(f"{label} has a value of type {type(value).__name__} that cannot be stored as metadata")


def _parse_attributes(value: Any, label: str) -> list[Attribute]:
    try:
        return [Attribute.from_dict(a) for a in _list_of_tables(value, label)]
    except KeyError as e:
        raise TypeError(f"{label}: attribute missing field {e}") from e


def _parse_affixes(value: Any, label: str) -> list[Affix]:
    affixes = []
    for i, entry in enumerate(_list_of_tables(value, label)):
        affixes.append(
            Affix(
                name=_string(entry["name"], f"{label}[{i}].name"),
                attributes=_parse_attributes(entry.get("attributes", []), f"{label}[{i}].attributes"),
            )
        )
    return affixes


def _parse_item_type(entry: dict[str, Any], label: str) -> ItemType:
    weight = entry["weight"]
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise TypeError(f"{label}.weight must be an integer, got {weight!r}")
    return ItemType(
        name=_string(entry["item_type"], f"{label}.item_type"),
        weight=weight,
        subtypes=_weight_table(entry["subtypes"], f"{label}.subtypes"),
        metadata=_metadata_table(entry.get("metadata", {}), f"{label}.metadata"),
    )


def _parse_attribute_entry(entry: dict[str, Any], label: str) -> AttributeEntry:
    return AttributeEntry(
        item_type=_string(entry.get("item_type", ""), f"{label}.item_type"),
        subtype=_string(entry.get("subtype", ""), f"{label}.subtype"),
        attributes=_parse_attributes(entry.get("attributes", []), f"{label}.attributes"),
    )


def _parse_name_list(entry: dict[str, Any], label: str) -> NameListEntry:
    names = entry.get("names", [])
    if not isinstance(names, list):
        raise TypeError(f"{label}.names must be a list")
    item_metadata = _table(entry.get("item_metadata", {}), f"{label}.item_metadata")
    return NameListEntry(
        item_type=_string(entry["item_type"], f"{label}.item_type"),
        subtype=_string(entry["subtype"], f"{label}.subtype"),
        names=[_string(n, f"{label}.names") for n in names],
        item_metadata={
            name: _metadata_table(meta, f"{label}.item_metadata.{name}")
            for name, meta in item_metadata.items()
        },
    )


def _parse_affix_entry(entry: dict[str, Any], label: str) -> AffixEntry:
    return AffixEntry(
        item_type=_string(entry.get("item_type", ""), f"{label}.item_type"),
        subtype=_string(entry.get("subtype", ""), f"{label}.subtype"),
        prefixes=_parse_affixes(entry.get("prefixes", []), f"{label}.prefixes"),
        suffixes=_parse_affixes(entry.get("suffixes", []), f"{label}.suffixes"),
        metadata=_metadata_table(entry.get("metadata", {}), f"{label}.metadata"),
    )


# =============================================================================
# APPLYING
# =============================================================================


def apply_document(catalog: LootCatalog, document: ConfigDocument, source: str = "<dict>") -> ImportResult:
    """
    Apply a validated document to a catalog.

    Qualities and item types are replaced wholesale. Attribute lists, name
    lists and affix pools replace whatever was stored at the same scope;
    per-name metadata is merged key by key.
    """
    catalog.replace_qualities(document.quality_data)
    catalog.replace_item_types(document.item_types)

    for entry in document.item_attributes:
        catalog.replace_attributes(entry.item_type, entry.subtype, entry.attributes)

    for entry in document.item_list:
        catalog.set_item_names(entry.item_type, entry.subtype, entry.names)
        for item_name, metadata in entry.item_metadata.items():
            for key, value in metadata.items():
                catalog.set_item_name_metadata(entry.item_type, entry.subtype, item_name, key, value)

    for entry in document.item_affixes:
        catalog.replace_affixes(entry.item_type, entry.subtype, entry.prefixes, entry.suffixes)
        if entry.metadata:
            catalog.replace_subtype_metadata(entry.item_type, entry.subtype, entry.metadata)

    return ImportResult(
        source=source,
        qualities=len(document.quality_data),
        item_types=len(document.item_types),
        attribute_scopes=len(document.item_attributes),
        name_lists=len(document.item_list),
        affix_scopes=len(document.item_affixes),
    )


def import_config(
    catalog: LootCatalog,
    source: ConfigSource,
    run_log: Optional["RunLog"] = None,
) -> ImportResult:
    """
    Load a config document into a catalog.

    Args:
        catalog: Catalog to update
        source: Mapping, TOML/JSON text, or a Path to a config file
        run_log: Optional run log that receives an import event

    Returns:
        ImportResult with counts of applied entries

    Raises:
        ConfigImportError: If the document is malformed. The catalog is
            left exactly as it was.
    """
    data, label = read_document(source)
    document = parse_document(data, label)
    result = apply_document(catalog, document, label)
    logger.info(f"Imported loot config from {label}: {result.counts()}")
    if run_log is not None:
        run_log.log_import(label, result.counts())
    return result


def load_catalog(source: ConfigSource) -> LootCatalog:
    """Build a new catalog from a config source."""
    catalog = LootCatalog()
    import_config(catalog, source)
    return catalog
