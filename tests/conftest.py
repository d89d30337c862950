"""
Pytest fixtures for the lootforge test suite.

Provides seeded random sources, small hand-built catalogs and a clean
run log.
"""

import pytest

from lootforge.catalog.loot_catalog import LootCatalog
from lootforge.content_loader.demo_catalog import build_demo_catalog
from lootforge.data_models import Attribute, LootRoller
from lootforge.observability.run_log import RunLog, reset_run_log


# =============================================================================
# RANDOMNESS FIXTURES
# =============================================================================


@pytest.fixture
def seeded_roller():
    """Provide a seeded LootRoller for reproducible tests."""
    return LootRoller(seed=42)


@pytest.fixture
def recording_roller():
    """Provide a seeded LootRoller that records every draw."""
    return LootRoller(seed=42, record_rolls=True)


# =============================================================================
# CATALOG FIXTURES
# =============================================================================


@pytest.fixture
def sample_catalog():
    """A small weapon/armor catalog with attributes, affixes and metadata."""
    catalog = LootCatalog()
    catalog.set_quality("common", 100)
    catalog.set_quality("rare", 10)

    catalog.set_item_type("weapon", 2)
    catalog.set_item_subtype("weapon", "sword", 3)
    catalog.set_item_subtype("weapon", "axe", 1)
    catalog.set_item_type("armor", 1)
    catalog.set_item_subtype("armor", "helm", 1)

    catalog.set_item_names("weapon", "sword", ["Iron Sword", "Steel Sword"])
    catalog.set_item_names("weapon", "axe", ["Hand Axe"])
    catalog.set_item_names("armor", "helm", ["Iron Helm"])

    catalog.set_attribute("", "", Attribute("strength_requirement", 0.0, 0.0, 100.0, False))
    catalog.set_attribute("weapon", "", Attribute("damage", 5.0, 1.0, 10.0, True))
    catalog.set_attribute("weapon", "", Attribute("critical_chance", 2.0, 0.0, 50.0, False))
    catalog.set_attribute("armor", "", Attribute("defense", 3.0, 1.0, 10.0, True))

    catalog.set_prefix_attribute("weapon", "", "Sharp", Attribute("damage", 2.0))
    catalog.set_suffix_attribute("weapon", "", "of Might", Attribute("strength_requirement", 5.0))
    catalog.set_prefix_attribute("armor", "", "Sturdy", Attribute("defense", 1.0))

    catalog.set_subtype_metadata("weapon", "sword", "hands", 1)
    catalog.set_item_name_metadata("weapon", "sword", "Steel Sword", "hands", 2)
    return catalog


@pytest.fixture
def demo_catalog():
    """The built-in demo catalog."""
    return build_demo_catalog()


# =============================================================================
# OBSERVABILITY FIXTURES
# =============================================================================


@pytest.fixture
def run_log():
    """Provide a fresh RunLog."""
    return RunLog()


@pytest.fixture
def clean_global_run_log():
    """Reset the process-wide RunLog before and after a test."""
    log = reset_run_log()
    yield log
    reset_run_log()
