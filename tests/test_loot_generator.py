"""
Tests for loot generation sessions and batch storage.
"""

import json
from collections import Counter

import pytest

from lootforge.catalog.loot_catalog import LootCatalog
from lootforge.data_models import (
    Attribute,
    GenerationOptions,
    GenerationOverrides,
    LootRoller,
)
from lootforge.items.loot_generator import DEFAULT_LOOT_KEY, LootGenerator, generate_loot
from lootforge.tables.weighted_selector import InvalidDataError


@pytest.fixture
def generator(sample_catalog):
    return LootGenerator(sample_catalog, roller=LootRoller(seed=99))


class TestGenerateLoot:

    def test_generates_requested_count(self, generator):
        items = generator.generate_loot(GenerationOptions(number_of_items=25))
        assert len(items) == 25

    def test_zero_items(self, generator):
        assert generator.generate_loot(GenerationOptions(number_of_items=0), key="none") == []
        assert generator.loot_keys() == ["none"]

    def test_quality_distribution_follows_weights(self):
        catalog = LootCatalog()
        catalog.set_quality("common", 100)
        catalog.set_quality("rare", 10)
        catalog.set_item_type("weapon", 1)
        catalog.set_item_subtype("weapon", "sword", 1)

        items = LootGenerator(catalog, roller=LootRoller(seed=3)).generate_loot(
            GenerationOptions(number_of_items=10000)
        )
        counts = Counter(item.quality for item in items)
        assert counts["rare"] / 10000 == pytest.approx(10 / 110, rel=0.1)

    def test_overrides_apply_to_every_item(self, generator):
        overrides = GenerationOverrides(quality="rare", item_type="weapon", subtype="axe")
        items = generator.generate_loot(GenerationOptions(number_of_items=30), overrides)
        assert {(i.quality, i.item_type, i.subtype, i.name) for i in items} == {
            ("rare", "weapon", "axe", "Hand Axe")
        }

    def test_requirements_equal_item_level(self, demo_catalog):
        generator = LootGenerator(demo_catalog, roller=LootRoller(seed=11))
        items = generator.generate_loot(
            GenerationOptions(number_of_items=200, base_level=10.0, level_variance=5.0, affix_chance=0.75)
        )
        checked = 0
        for item in items:
            for name, attribute in item.attributes.items():
                if name.endswith("_requirement"):
                    assert attribute.initial_value == item.level
                    checked += 1
        assert checked > 0

    def test_same_seed_same_batch(self, sample_catalog):
        options = GenerationOptions(number_of_items=20, affix_chance=0.5)
        first = LootGenerator(sample_catalog, roller=LootRoller(seed=5)).generate_loot(options)
        second = LootGenerator(sample_catalog, roller=LootRoller(seed=5)).generate_loot(options)
        assert first == second


class TestFailures:

    def test_empty_quality_table_stores_nothing(self, generator):
        generator.catalog.replace_qualities({})
        with pytest.raises(InvalidDataError):
            generator.generate_loot(GenerationOptions(number_of_items=5), key="broken")
        assert generator.get_loot("broken") == []
        assert "broken" not in generator.loot_keys()

    def test_empty_catalog_fails(self):
        with pytest.raises(InvalidDataError):
            LootGenerator().generate_loot(GenerationOptions(number_of_items=1))

    def test_failure_keeps_previous_batch(self, generator):
        generator.generate_loot(GenerationOptions(number_of_items=3), key="chest")
        generator.catalog.replace_item_types([])
        with pytest.raises(InvalidDataError):
            generator.generate_loot(GenerationOptions(number_of_items=3), key="chest")
        assert len(generator.get_loot("chest")) == 3

    def test_failed_batch_logged(self, sample_catalog, run_log):
        sample_catalog.replace_qualities({})
        generator = LootGenerator(sample_catalog, run_log=run_log)
        with pytest.raises(InvalidDataError):
            generator.generate_loot(GenerationOptions(number_of_items=2), key="bad")
        batch = run_log.get_batches()[-1]
        assert not batch.success
        assert batch.generated == 0
        assert batch.error


class TestStorage:

    def test_default_key(self, generator):
        items = generator.generate_loot(GenerationOptions(number_of_items=2))
        assert generator.get_loot() == items
        assert generator.loot_keys() == [DEFAULT_LOOT_KEY]

    def test_same_key_replaces_batch(self, generator):
        generator.generate_loot(GenerationOptions(number_of_items=5), key="chest")
        generator.generate_loot(GenerationOptions(number_of_items=2), key="chest")
        assert len(generator.get_loot("chest")) == 2

    def test_unknown_key_is_empty(self, generator):
        assert generator.get_loot("nothing") == []
        assert generator.get_loot_json("nothing") == "[]"

    def test_returned_list_is_a_copy(self, generator):
        items = generator.generate_loot(GenerationOptions(number_of_items=2), key="chest")
        items.clear()
        assert len(generator.get_loot("chest")) == 2

    def test_clear_loot(self, generator):
        generator.generate_loot(GenerationOptions(number_of_items=1), key="a")
        generator.generate_loot(GenerationOptions(number_of_items=1), key="b")
        generator.clear_loot("a")
        assert generator.loot_keys() == ["b"]
        generator.clear_loot()
        assert generator.loot_keys() == []

    def test_json_output(self, generator):
        text = generator.generate_loot_json(GenerationOptions(number_of_items=3), key="chest")
        data = json.loads(text)
        assert len(data) == 3
        assert {"name", "quality", "type", "subtype", "prefix", "suffix", "attributes", "metadata"} <= set(data[0])
        assert json.loads(generator.get_loot_json("chest")) == data


class TestSessionIntegration:

    def test_load_config_then_generate(self, run_log):
        generator = LootGenerator(roller=LootRoller(seed=1), run_log=run_log)
        result = generator.load_config({
            "quality_data": {"common": 1},
            "item_types": [{"item_type": "weapon", "weight": 1, "subtypes": {"sword": 1}}],
            "item_list": [{"item_type": "weapon", "subtype": "sword", "names": ["Blade"]}],
        })
        assert result.qualities == 1
        items = generator.generate_loot(GenerationOptions(number_of_items=2))
        assert [item.name for item in items] == ["Blade", "Blade"]
        assert run_log.get_seed() == 1
        assert run_log.get_batches()[-1].success

    def test_module_level_generate_loot(self, sample_catalog):
        sample_catalog.set_attribute("armor", "helm", Attribute("weight", 4.0, 1.0, 9.0, True))
        items = generate_loot(
            sample_catalog,
            GenerationOptions(number_of_items=4),
            GenerationOverrides(item_type="armor"),
            roller=LootRoller(seed=8),
        )
        assert len(items) == 4
        assert all(item.has_attribute("weight") for item in items)
