"""
Shared data structures for lootforge.

Every engine module (catalog, selector, scaler, assembler, importer) reads and
writes these types. Generated items are plain dataclasses so callers are free
to mutate them after generation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Sequence
import random


REQUIREMENT_MARKER = "_requirement"
LEVEL_ATTRIBUTE = "level"


# =============================================================================
# ENUMS
# =============================================================================


class ScalingMode(str, Enum):
    """How attribute values grow with item level."""
    LINEAR = "linear"            # value += level * factor
    EXPONENTIAL = "exponential"  # value *= factor ** level


# =============================================================================
# RANDOMIZATION
# =============================================================================


@dataclass
class RollRecord:
    """A single recorded draw from a LootRoller."""
    kind: str  # "randint", "random", "choice"
    reason: str
    result: Any
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.kind}: {self.result} ({self.reason})"


class LootRoller:
    """
    Centralized randomization interface.

    All draws made while generating loot go through a LootRoller so that a
    fixed seed reproduces an entire batch. Unlike the module-level functions
    in ``random``, each roller owns its own generator state, so independent
    sessions never disturb each other.

    Usage:
        roller = LootRoller(seed=42)
        roller.randint(1, 6, "test roll")
        roller.choice(["a", "b"], "pick a letter")
    """

    def __init__(self, seed: Optional[int] = None, record_rolls: bool = False):
        """
        Initialize the roller.

        Args:
            seed: Optional seed. None seeds from system entropy.
            record_rolls: Keep a RollRecord for every draw (for debugging and tests)
        """
        self._seed = seed
        self._rng = random.Random(seed)
        self._record_rolls = record_rolls
        self._roll_log: list[RollRecord] = []

    @property
    def seed(self) -> Optional[int]:
        """The seed this roller was last seeded with."""
        return self._seed

    def set_seed(self, seed: int) -> None:
        """Reseed the roller for reproducibility."""
        self._seed = seed
        self._rng.seed(seed)

    def _record(self, kind: str, reason: str, result: Any) -> None:
        if self._record_rolls:
            self._roll_log.append(RollRecord(kind=kind, reason=reason, result=result))

    def randint(self, a: int, b: int, reason: str = "") -> int:
        """
        Return a random integer in range [a, b], inclusive.

        Raises:
            ValueError: If a > b
        """
        result = self._rng.randint(a, b)
        self._record("randint", reason, result)
        return result

    def random(self, reason: str = "") -> float:
        """Return a random float in [0.0, 1.0)."""
        result = self._rng.random()
        self._record("random", reason, result)
        return result

    def choice(self, seq: Sequence[Any], reason: str = "") -> Any:
        """
        Choose a uniformly random element from a non-empty sequence.

        Raises:
            IndexError: If sequence is empty
        """
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        result = seq[self._rng.randrange(len(seq))]
        self._record("choice", reason, result)
        return result

    def roll_chance(self, probability: float, reason: str = "") -> bool:
        """Bernoulli trial: True with the given probability."""
        return self.random(reason) < probability

    def get_roll_log(self) -> list[RollRecord]:
        """Get the recorded draws (empty unless record_rolls was enabled)."""
        return self._roll_log.copy()

    def clear_roll_log(self) -> None:
        """Clear the roll log."""
        self._roll_log = []


# =============================================================================
# ATTRIBUTES AND AFFIXES
# =============================================================================


@dataclass
class Attribute:
    """
    A named numeric stat on an item (damage, durability, strength_requirement...).

    min and max are advisory. They are seeded from initial_value the first time
    a value is set on an attribute with zero bounds, but generated values are
    never clamped to them.
    """
    name: str
    initial_value: float
    min: float = 0.0
    max: float = 0.0
    required: bool = False
    scaling_factor: float = 1.0
    chance: float = 0.0

    @property
    def is_requirement(self) -> bool:
        """Requirement attributes track the item level instead of scaling."""
        return REQUIREMENT_MARKER in self.name

    def set_initial_value(self, value: float) -> None:
        """Assign a value, seeding zero bounds with it first."""
        if self.min == 0.0 and self.max == 0.0:
            self.min = value
            self.max = value
        self.initial_value = value

    def copy(self) -> "Attribute":
        return Attribute(
            name=self.name,
            initial_value=self.initial_value,
            min=self.min,
            max=self.max,
            required=self.required,
            scaling_factor=self.scaling_factor,
            chance=self.chance,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "initial_value": self.initial_value,
            "min": self.min,
            "max": self.max,
            "required": self.required,
            "scaling_factor": self.scaling_factor,
            "chance": self.chance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attribute":
        """
        Create from dictionary.

        name, initial_value, min, max and required are mandatory; scaling_factor
        and chance default to 0.0 when absent.

        Raises:
            KeyError: If a mandatory field is missing
            TypeError, ValueError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise TypeError(f"attribute must be a mapping, got {type(data).__name__}")
        name = data["name"]
        if not isinstance(name, str):
            raise TypeError(f"attribute name must be a string, got {type(name).__name__}")
        required = data["required"]
        if not isinstance(required, bool):
            raise TypeError(f"attribute '{name}' required flag must be a boolean")
        return cls(
            name=name,
            initial_value=_as_float(data["initial_value"], f"{name}.initial_value"),
            min=_as_float(data["min"], f"{name}.min"),
            max=_as_float(data["max"], f"{name}.max"),
            required=required,
            scaling_factor=_as_float(data.get("scaling_factor", 0.0), f"{name}.scaling_factor"),
            chance=_as_float(data.get("chance", 0.0), f"{name}.chance"),
        )


@dataclass
class Affix:
    """
    A named prefix or suffix bundling attribute contributions.

    The empty affix (no name, no attributes) means "no affix applied".
    """
    name: str = ""
    attributes: list[Attribute] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "Affix":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.attributes

    def set_attribute(self, attribute: Attribute) -> None:
        """Replace the same-named attribute in place, or append a new one."""
        for index, existing in enumerate(self.attributes):
            if existing.name == attribute.name:
                self.attributes[index] = attribute
                return
        self.attributes.append(attribute)

    def get_attribute(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def copy(self) -> "Affix":
        return Affix(name=self.name, attributes=[a.copy() for a in self.attributes])

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "attributes": [a.to_dict() for a in self.attributes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Affix":
        if not isinstance(data, dict):
            raise TypeError(f"affix must be a mapping, got {type(data).__name__}")
        attributes = data.get("attributes", [])
        if not isinstance(attributes, list):
            raise TypeError(f"affix '{data.get('name', '')}' attributes must be a list")
        return cls(
            name=str(data.get("name", "")),
            attributes=[Attribute.from_dict(a) for a in attributes],
        )


# =============================================================================
# TAXONOMY
# =============================================================================


@dataclass
class ItemType:
    """A weighted item type with its own weighted subtypes."""
    name: str
    weight: int = 0
    subtypes: dict[str, int] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def add_subtype(self, subtype: str, weight: int) -> None:
        """Add or replace a subtype weight."""
        self.subtypes[subtype] = weight

    def has_subtype(self, subtype: str) -> bool:
        return subtype in self.subtypes

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str) -> Optional[Any]:
        return self.metadata.get(key)

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def copy(self) -> "ItemType":
        return ItemType(
            name=self.name,
            weight=self.weight,
            subtypes=dict(self.subtypes),
            metadata=dict(self.metadata),
        )


# =============================================================================
# GENERATED ITEMS
# =============================================================================


@dataclass
class Item:
    """
    A fully generated item.

    attributes holds the final scaled values keyed by attribute name and always
    includes the generated "level" attribute. metadata merges subtype tags with
    per-name tags (per-name wins).
    """
    name: str
    quality: str
    item_type: str
    subtype: str
    prefix: Affix = field(default_factory=Affix.empty)
    suffix: Affix = field(default_factory=Affix.empty)
    attributes: dict[str, Attribute] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def level(self) -> Optional[float]:
        """The generated item level, if one was assigned."""
        level_attribute = self.attributes.get(LEVEL_ATTRIBUTE)
        return level_attribute.initial_value if level_attribute else None

    @property
    def display_name(self) -> str:
        """Name decorated with prefix and suffix, e.g. 'heavy chestplate of the bear'."""
        parts = [self.prefix.name, self.name, self.suffix.name]
        return " ".join(part for part in parts if part)

    def set_attribute(self, name: str, attribute: Attribute) -> None:
        self.attributes[name] = attribute

    def get_attribute(self, name: str) -> Optional[Attribute]:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str) -> Optional[Any]:
        return self.metadata.get(key)

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "quality": self.quality,
            "type": self.item_type,
            "subtype": self.subtype,
            "prefix": self.prefix.to_dict(),
            "suffix": self.suffix.to_dict(),
            "attributes": {key: attr.to_dict() for key, attr in self.attributes.items()},
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Create from dictionary."""
        attributes = data.get("attributes", {})
        if not isinstance(attributes, dict):
            raise TypeError("item attributes must be a mapping")
        metadata = data.get("metadata", {})
        if not isinstance(metadata, dict):
            raise TypeError("item metadata must be a mapping")
        return cls(
            name=data["name"],
            quality=data["quality"],
            item_type=data["type"],
            subtype=data["subtype"],
            prefix=Affix.from_dict(data.get("prefix") or {}),
            suffix=Affix.from_dict(data.get("suffix") or {}),
            attributes={key: Attribute.from_dict(attr) for key, attr in attributes.items()},
            metadata=dict(metadata),
        )


# =============================================================================
# GENERATION PARAMETERS
# =============================================================================


@dataclass
class GenerationOptions:
    """Parameters for one generation call."""
    number_of_items: int = 1
    base_level: float = 1.0
    level_variance: float = 1.0
    affix_chance: float = 0.25
    scaling_mode: ScalingMode = ScalingMode.LINEAR
    scaling_factor: float = 1.0

    def __post_init__(self):
        if isinstance(self.scaling_mode, str) and not isinstance(self.scaling_mode, ScalingMode):
            self.scaling_mode = ScalingMode(self.scaling_mode.lower())
        if self.number_of_items < 0:
            raise ValueError(f"number_of_items must be >= 0, got {self.number_of_items}")
        if self.level_variance < 0:
            raise ValueError(f"level_variance must be >= 0, got {self.level_variance}")
        if not 0.0 <= self.affix_chance <= 1.0:
            raise ValueError(f"affix_chance must be within [0, 1], got {self.affix_chance}")

    @property
    def is_linear(self) -> bool:
        return self.scaling_mode == ScalingMode.LINEAR

    @property
    def is_exponential(self) -> bool:
        return self.scaling_mode == ScalingMode.EXPONENTIAL

    @property
    def level_range(self) -> tuple[int, int]:
        """Inclusive (low, high) integer level bounds, truncated toward zero."""
        return (
            int(self.base_level - self.level_variance),
            int(self.base_level + self.level_variance),
        )


@dataclass
class GenerationOverrides:
    """Forced values for one generation call. Empty strings mean "roll it"."""
    quality: str = ""
    item_type: str = ""
    subtype: str = ""

    @classmethod
    def empty(cls) -> "GenerationOverrides":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.quality or self.item_type or self.subtype)


def _as_float(value: Any, label: str) -> float:
    """Coerce an int/float config value to float, rejecting bools and strings."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{label} must be a number, got {value!r}")
    return float(value)
