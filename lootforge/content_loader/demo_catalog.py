"""
Built-in demo catalog: five quality tiers, weapons and armor.

Used by the command-line front end when no config file is given (--demo),
and handy as a fixture for experimenting with generation options.
"""

from lootforge.catalog.loot_catalog import LootCatalog
from lootforge.data_models import Attribute


QUALITY_WEIGHTS = {
    "common": 100,
    "uncommon": 60,
    "rare": 30,
    "epic": 9,
    "legendary": 1,
}

SUBTYPES = {
    "weapon": ["one-handed", "two-handed"],
    "armor": ["chest", "feet", "hands", "head", "legs", "shoulders", "waist", "wrists"],
}

ITEM_NAMES = {
    ("armor", "chest"): ["chestplate", "tunic"],
    ("armor", "feet"): ["boots", "shoes"],
    ("armor", "hands"): ["gauntlets", "gloves"],
    ("armor", "head"): ["helm", "hood"],
    ("armor", "legs"): ["legplates", "leggings"],
    ("armor", "shoulders"): ["shoulderplates", "pauldrons"],
    ("armor", "waist"): ["belt", "girdle"],
    ("armor", "wrists"): ["bracers", "vambraces"],
    ("weapon", "one-handed"): ["sword", "axe", "mace", "dagger"],
    ("weapon", "two-handed"): ["sword", "axe", "mace", "staff"],
}

# (type, subtype, name, initial_value, min, max, required)
ATTRIBUTES = [
    ("", "", "strength_requirement", 0.0, 0.0, 100.0, False),
    ("", "", "dexterity_requirement", 0.0, 0.0, 100.0, False),
    ("", "", "intelligence_requirement", 0.0, 0.0, 100.0, False),
    ("weapon", "", "level_requirement", 0.0, 0.0, 100.0, False),
    ("weapon", "", "durability", 16.0, 1.0, 16.0, True),
    ("weapon", "", "attack_damage", 1.0, 1.0, 5.0, True),
    ("weapon", "", "attack_speed", 0.0, 0.0, 100.0, True),
    ("weapon", "", "critical_chance", 0.0, 0.0, 100.0, False),
    ("weapon", "", "critical_damage", 0.0, 0.0, 100.0, False),
    ("armor", "", "level_requirement", 0.0, 0.0, 100.0, False),
    ("armor", "", "durability", 20.0, 1.0, 20.0, True),
    ("armor", "", "defense", 2.0, 1.0, 10.0, True),
]

# (type, affix name, attribute name, contribution)
PREFIXES = [
    ("armor", "heavy", "durability", 10.0),
    ("armor", "light", "durability", -10.0),
    ("armor", "light", "strength_requirement", -10.0),
    ("armor", "strong", "strength_requirement", 10.0),
    ("weapon", "sharp", "attack_damage", 10.0),
    ("weapon", "dull", "attack_damage", -10.0),
    ("weapon", "heavy", "attack_speed", -10.0),
    ("weapon", "light", "attack_speed", 10.0),
    ("weapon", "strong", "strength_requirement", 10.0),
]

SUFFIXES = [
    ("armor", "of the bear", "strength_requirement", 10.0),
    ("armor", "of the eagle", "intelligence_requirement", 10.0),
    ("armor", "of the wolf", "dexterity_requirement", 10.0),
    ("armor", "of the lion", "strength_requirement", 5.0),
    ("weapon", "of the bear", "strength_requirement", 10.0),
    ("weapon", "of the eagle", "intelligence_requirement", 10.0),
    ("weapon", "of the wolf", "dexterity_requirement", 10.0),
    ("weapon", "of the lion", "strength_requirement", 5.0),
]

SUBTYPE_METADATA = {
    ("weapon", "two-handed"): {"hands": 2},
    ("weapon", "one-handed"): {"hands": 1},
}


def build_demo_catalog() -> LootCatalog:
    """Build a fresh catalog populated with the demo weapons and armor."""
    catalog = LootCatalog()

    for quality, weight in QUALITY_WEIGHTS.items():
        catalog.set_quality(quality, weight)

    for item_type, subtypes in SUBTYPES.items():
        catalog.set_item_type(item_type, 1)
        for subtype in subtypes:
            catalog.set_item_subtype(item_type, subtype, 1)

    for (item_type, subtype), names in ITEM_NAMES.items():
        catalog.set_item_names(item_type, subtype, names)

    for item_type, subtype, name, value, low, high, required in ATTRIBUTES:
        catalog.set_attribute(item_type, subtype, Attribute(name, value, low, high, required))

    for item_type, affix, attribute, value in PREFIXES:
        catalog.set_prefix_attribute(item_type, "", affix, Attribute(attribute, value))
    for item_type, affix, attribute, value in SUFFIXES:
        catalog.set_suffix_attribute(item_type, "", affix, Attribute(attribute, value))

    for (item_type, subtype), metadata in SUBTYPE_METADATA.items():
        for key, value in metadata.items():
            catalog.set_subtype_metadata(item_type, subtype, key, value)

    return catalog
