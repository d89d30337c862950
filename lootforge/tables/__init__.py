"""Weighted random selection over name -> weight tables."""

from lootforge.tables.weighted_selector import InvalidDataError, WeightedSelector

__all__ = ["InvalidDataError", "WeightedSelector"]
