"""
JSON (de)serialization for generated item batches.

Each item is written as:

    {
        "name": "chestplate",
        "quality": "rare",
        "type": "armor",
        "subtype": "chest",
        "prefix": {"name": "heavy", "attributes": [...]},
        "suffix": {"name": "", "attributes": []},
        "attributes": {"level": {...}, "durability": {...}},
        "metadata": {"slot": "chest"}
    }

Loading a saved batch reproduces identical field values.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from lootforge.data_models import Item

logger = logging.getLogger(__name__)


class ItemDecodeError(ValueError):
    """Raised when an item document cannot be decoded."""
    pass


def items_to_dicts(items: Iterable[Item]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]


def items_from_dicts(data: Any) -> list[Item]:
    """
    Rebuild items from a list of item mappings.

    Raises:
        ItemDecodeError: If the data is not a list of valid item mappings
    """
    if not isinstance(data, list):
        raise ItemDecodeError("item document must be a list of items")

    items = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ItemDecodeError(f"item {index} is not an object")
        try:
            items.append(Item.from_dict(entry))
        except KeyError as e:
            raise ItemDecodeError(f"item {index} is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise ItemDecodeError(f"item {index} is malformed: {e}") from e
    return items


def items_to_json(items: Iterable[Item], indent: Optional[int] = None) -> str:
    """Serialize items to JSON text."""
    return json.dumps(items_to_dicts(items), indent=indent)


def items_from_json(text: str) -> list[Item]:
    """
    Deserialize items from JSON text.

    Raises:
        ItemDecodeError: If the text is not valid JSON or not an item list
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ItemDecodeError(f"invalid JSON: {e}") from e
    return items_from_dicts(data)


def save_items(items: Iterable[Item], path: Union[str, Path], indent: int = 2) -> int:
    """
    Write items to a JSON file.

    Returns:
        Number of items written
    """
    payload = items_to_dicts(items)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent)
    logger.info(f"Saved {len(payload)} items to {path}")
    return len(payload)


def load_items(path: Union[str, Path]) -> list[Item]:
    """Read items from a JSON file written by save_items."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    items = items_from_json(text)
    logger.info(f"Loaded {len(items)} items from {path}")
    return items
