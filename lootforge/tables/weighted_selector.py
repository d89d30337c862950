"""
Weighted random selection over name -> weight tables.

Used for quality tiers, item types and subtypes. Candidates are walked in
sorted name order so that a given draw always maps to the same candidate,
independent of how the mapping was built.
"""

import logging
from typing import Mapping, Optional, TYPE_CHECKING

from lootforge.data_models import LootRoller

if TYPE_CHECKING:
    from lootforge.observability.run_log import RunLog

logger = logging.getLogger(__name__)


class InvalidDataError(ValueError):
    """Raised when a weight table cannot be selected from."""
    pass


class WeightedSelector:
    """
    Picks one key from a weight table, proportionally to its weight.

    Usage:
        selector = WeightedSelector(LootRoller(seed=7))
        quality = selector.select({"common": 100, "rare": 10}, table_name="quality")
    """

    def __init__(
        self,
        roller: Optional[LootRoller] = None,
        run_log: Optional["RunLog"] = None,
    ):
        """
        Initialize the selector.

        Args:
            roller: Random source. A fresh unseeded LootRoller when None.
            run_log: Optional run log that receives one event per selection
        """
        self.roller = roller or LootRoller()
        self.run_log = run_log

    def select(self, weights: Mapping[str, int], table_name: str = "") -> str:
        """
        Select one name from the weight table.

        Args:
            weights: Mapping of candidate name to non-negative integer weight
            table_name: Label used in logs and roll reasons

        Returns:
            The selected name

        Raises:
            InvalidDataError: If the table is empty, has a negative weight,
                or its weights sum to zero
        """
        if not weights:
            raise InvalidDataError(f"No items to select from ({table_name or 'weights'})")

        negative = sorted(name for name, weight in weights.items() if weight < 0)
        if negative:
            raise InvalidDataError(
                f"Negative weights in {table_name or 'weights'}: {', '.join(negative)}"
            )

        total = sum(weights.values())
        if total <= 0:
            logger.warning(f"Weight table {table_name or 'weights'} sums to zero")
            raise InvalidDataError(
                f"Total weight of {table_name or 'weights'} must be positive"
            )

        roll = self.roller.randint(0, total - 1, f"weighted select: {table_name}")
        remaining = roll
        for name in sorted(weights):
            remaining -= weights[name]
            if remaining < 0:
                if self.run_log is not None:
                    self.run_log.log_selection(
                        table_name=table_name,
                        roll=roll,
                        total_weight=total,
                        result=name,
                    )
                return name

        # Unreachable while total > 0
        raise RuntimeError(
            f"Weighted selection over {table_name or 'weights'} fell through "
            f"(roll={roll}, total={total})"
        )
