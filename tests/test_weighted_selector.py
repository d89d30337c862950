"""
Tests for weighted selection over name -> weight tables.
"""

from collections import Counter

import pytest

from lootforge.data_models import LootRoller
from lootforge.tables.weighted_selector import InvalidDataError, WeightedSelector


class FixedRoller(LootRoller):
    """LootRoller whose randint returns a scripted sequence of values."""

    def __init__(self, values):
        super().__init__(seed=0)
        self._values = list(values)

    def randint(self, a, b, reason=""):
        value = self._values.pop(0)
        assert a <= value <= b
        return value


class TestWeightedSelector:
    """Tests for WeightedSelector.select."""

    def test_single_candidate_always_selected(self, seeded_roller):
        selector = WeightedSelector(seeded_roller)
        assert all(selector.select({"only": 7}) == "only" for _ in range(50))

    def test_draw_walks_sorted_names(self):
        # sorted order: axe (1), sword (3)
        weights = {"sword": 3, "axe": 1}
        selector = WeightedSelector(FixedRoller([0, 1, 3]))
        assert selector.select(weights) == "axe"
        assert selector.select(weights) == "sword"
        assert selector.select(weights) == "sword"

    def test_insertion_order_does_not_matter(self):
        first = WeightedSelector(LootRoller(seed=5))
        second = WeightedSelector(LootRoller(seed=5))
        a = [first.select({"x": 1, "y": 2, "z": 3}) for _ in range(20)]
        b = [second.select({"z": 3, "x": 1, "y": 2}) for _ in range(20)]
        assert a == b

    def test_zero_weight_never_selected(self, seeded_roller):
        selector = WeightedSelector(seeded_roller)
        picks = {selector.select({"never": 0, "always": 5}) for _ in range(200)}
        assert picks == {"always"}

    def test_distribution_follows_weights(self):
        selector = WeightedSelector(LootRoller(seed=2024))
        counts = Counter(selector.select({"common": 100, "rare": 10}) for _ in range(11000))
        assert counts["rare"] == pytest.approx(1000, rel=0.1)

    def test_empty_table_raises(self, seeded_roller):
        with pytest.raises(InvalidDataError, match="No items"):
            WeightedSelector(seeded_roller).select({}, "quality")

    def test_all_zero_weights_raises(self, seeded_roller):
        with pytest.raises(InvalidDataError):
            WeightedSelector(seeded_roller).select({"a": 0, "b": 0}, "quality")

    def test_negative_weight_raises(self, seeded_roller):
        with pytest.raises(InvalidDataError, match="Negative"):
            WeightedSelector(seeded_roller).select({"a": 5, "b": -1})

    def test_invalid_data_error_is_value_error(self):
        assert issubclass(InvalidDataError, ValueError)

    def test_selection_logged(self, seeded_roller, run_log):
        selector = WeightedSelector(seeded_roller, run_log)
        result = selector.select({"common": 3, "rare": 1}, "quality")
        events = run_log.get_selections()
        assert len(events) == 1
        assert events[0].table_name == "quality"
        assert events[0].total_weight == 4
        assert events[0].result == result
