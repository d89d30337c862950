"""
Tests for single-item assembly.
"""

import logging
from collections import Counter

import pytest

from lootforge.catalog.loot_catalog import LootCatalog, resolve_scopes
from lootforge.data_models import (
    Attribute,
    GenerationOptions,
    GenerationOverrides,
    LootRoller,
    ScalingMode,
)
from lootforge.items.item_assembler import ItemAssembler
from lootforge.tables.weighted_selector import InvalidDataError


def _assembler(catalog, roller=None, run_log=None, overrides=None, **option_kwargs):
    options = GenerationOptions(**option_kwargs)
    return ItemAssembler(
        catalog,
        options,
        overrides=overrides,
        roller=roller or LootRoller(seed=7),
        run_log=run_log,
    )


SWORD = GenerationOverrides(item_type="weapon", subtype="sword")


class TestSelection:

    def test_item_drawn_from_catalog(self, sample_catalog):
        assembler = _assembler(sample_catalog)
        for _ in range(50):
            item = assembler.assemble()
            assert item.quality in ("common", "rare")
            assert sample_catalog.has_item_subtype(item.item_type, item.subtype)
            assert item.name in sample_catalog.get_item_names(item.item_type, item.subtype)

    def test_overrides_are_absolute(self, sample_catalog):
        overrides = GenerationOverrides(quality="rare", item_type="armor", subtype="helm")
        assembler = _assembler(sample_catalog, overrides=overrides)
        for _ in range(20):
            item = assembler.assemble()
            assert (item.quality, item.item_type, item.subtype) == ("rare", "armor", "helm")

    def test_unknown_override_is_used_with_warning(self, sample_catalog, caplog):
        assembler = _assembler(sample_catalog, overrides=GenerationOverrides(quality="mythic"))
        with caplog.at_level(logging.WARNING):
            item = assembler.assemble()
        assert item.quality == "mythic"
        assert "mythic" in caplog.text

    def test_unknown_forced_type_has_empty_subtype(self, sample_catalog):
        item = _assembler(sample_catalog, overrides=GenerationOverrides(item_type="ring")).assemble()
        assert item.item_type == "ring"
        assert item.subtype == ""
        assert item.name == ""

    def test_name_falls_back_to_subtype(self, sample_catalog):
        sample_catalog.set_item_subtype("armor", "boots", 1)
        overrides = GenerationOverrides(item_type="armor", subtype="boots")
        assert _assembler(sample_catalog, overrides=overrides).assemble().name == "boots"

    def test_empty_quality_table_fails(self, sample_catalog):
        sample_catalog.replace_qualities({})
        with pytest.raises(InvalidDataError):
            _assembler(sample_catalog).assemble()

    def test_empty_type_table_fails(self):
        catalog = LootCatalog()
        catalog.set_quality("common", 1)
        with pytest.raises(InvalidDataError):
            _assembler(catalog).assemble()

    def test_type_without_subtypes_fails(self):
        catalog = LootCatalog()
        catalog.set_quality("common", 1)
        catalog.set_item_type("weapon", 1)
        with pytest.raises(InvalidDataError):
            _assembler(catalog).assemble()


class TestAffixPools:

    def test_affix_defined_at_two_scopes_is_twice_as_likely(self):
        catalog = LootCatalog()
        catalog.set_quality("common", 1)
        catalog.set_item_subtype("weapon", "sword", 1)
        catalog.set_prefix_attribute("", "", "Keen", Attribute("damage", 1.0))
        catalog.set_prefix_attribute("weapon", "", "Keen", Attribute("damage", 1.0))
        catalog.set_prefix_attribute("weapon", "sword", "Heavy", Attribute("weight", 1.0))

        pooled = [p.name for scope in resolve_scopes("weapon", "sword") for p in catalog.get_prefixes(*scope)]
        assert sorted(pooled) == ["Heavy", "Keen", "Keen"]

        assembler = _assembler(catalog, roller=LootRoller(seed=17), overrides=SWORD, affix_chance=1.0)
        counts = Counter(assembler.assemble().prefix.name for _ in range(3000))
        assert set(counts) == {"Keen", "Heavy"}
        assert counts["Keen"] / 3000 == pytest.approx(2 / 3, abs=0.05)


class TestLevelAndAttributes:

    def test_level_within_range(self, sample_catalog):
        assembler = _assembler(sample_catalog, base_level=10.0, level_variance=3.0)
        levels = {assembler.assemble().level for _ in range(200)}
        assert levels <= {float(n) for n in range(7, 14)}
        assert len(levels) > 1

    def test_required_only_without_affixes(self, sample_catalog):
        item = _assembler(
            sample_catalog, overrides=SWORD, base_level=10.0, level_variance=0.0, affix_chance=0.0
        ).assemble()
        assert item.level == 10.0
        assert set(item.attributes) == {"level", "damage"}
        assert item.get_attribute("damage").initial_value == pytest.approx(15.0)
        assert item.prefix.is_empty and item.suffix.is_empty

    def test_everything_applied_at_full_chance(self, sample_catalog):
        item = _assembler(
            sample_catalog, overrides=SWORD, base_level=10.0, level_variance=0.0, affix_chance=1.0
        ).assemble()
        assert item.prefix.name == "Sharp"
        assert item.suffix.name == "of Might"
        # 5 + level 10, plus the Sharp prefix's 2
        assert item.get_attribute("damage").initial_value == pytest.approx(17.0)
        assert item.get_attribute("critical_chance").initial_value == pytest.approx(12.0)
        # requirement stays pinned to the level after the suffix adds to it
        assert item.get_attribute("strength_requirement").initial_value == 10.0
        assert item.display_name in ("Sharp Iron Sword of Might", "Sharp Steel Sword of Might")

    def test_specific_scope_overwrites_general(self, sample_catalog):
        sample_catalog.set_attribute("weapon", "sword", Attribute("damage", 50.0, 1.0, 99.0, True))
        item = _assembler(
            sample_catalog, overrides=SWORD, base_level=1.0, level_variance=0.0, affix_chance=0.0
        ).assemble()
        assert item.get_attribute("damage").initial_value == pytest.approx(51.0)

    def test_exponential_scaling(self, sample_catalog):
        item = _assembler(
            sample_catalog,
            overrides=SWORD,
            base_level=3.0,
            level_variance=0.0,
            affix_chance=0.0,
            scaling_mode=ScalingMode.EXPONENTIAL,
            scaling_factor=2.0,
        ).assemble()
        assert item.get_attribute("damage").initial_value == pytest.approx(40.0)

    def test_required_requirement_attribute_equals_level(self, sample_catalog):
        sample_catalog.set_attribute("", "", Attribute("level_requirement", 0.0, 0.0, 100.0, True))
        assembler = _assembler(sample_catalog, base_level=20.0, level_variance=5.0)
        for _ in range(30):
            item = assembler.assemble()
            assert item.get_attribute("level_requirement").initial_value == item.level

    def test_item_edits_do_not_leak_into_catalog(self, sample_catalog):
        item = _assembler(sample_catalog, overrides=SWORD, affix_chance=1.0).assemble()
        item.get_attribute("damage").initial_value = -1.0
        item.prefix.attributes[0].initial_value = -1.0
        assert sample_catalog.get_attributes("weapon", "")[0].initial_value == 5.0
        assert sample_catalog.get_prefixes("weapon", "")[0].attributes[0].initial_value == 2.0


class TestMetadata:

    def test_name_metadata_wins_over_subtype(self, sample_catalog):
        assembler = _assembler(sample_catalog, overrides=SWORD)
        seen = {}
        for _ in range(50):
            item = assembler.assemble()
            seen[item.name] = item.get_metadata("hands")
        assert seen == {"Iron Sword": 1, "Steel Sword": 2}

    def test_metadata_is_copied(self, sample_catalog):
        sample_catalog.set_subtype_metadata("weapon", "sword", "tags", ["blade"])
        item = _assembler(sample_catalog, overrides=SWORD).assemble()
        item.get_metadata("tags").append("edited")
        assert sample_catalog.get_subtype_metadata("weapon", "sword", "tags") == ["blade"]


class TestRunLogging:

    def test_item_event_recorded(self, sample_catalog, run_log):
        item = _assembler(sample_catalog, run_log=run_log).assemble()
        events = run_log.get_items()
        assert len(events) == 1
        assert events[0].name == item.name
        assert events[0].level == item.level
        assert [e.table_name for e in run_log.get_selections()][:2] == ["quality", "item_type"]
