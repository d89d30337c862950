"""
Loot generation sessions.

A LootGenerator owns one catalog, one random source and a store of generated
batches keyed by name. Batches are all-or-nothing: if any item in a batch
cannot be generated, nothing is stored and the error propagates.
"""

import logging
from typing import Optional, TYPE_CHECKING

from lootforge.catalog.loot_catalog import LootCatalog
from lootforge.content_loader.config_import import ConfigSource, ImportResult, import_config
from lootforge.content_loader.item_export import items_to_json
from lootforge.data_models import GenerationOptions, GenerationOverrides, Item, LootRoller
from lootforge.items.item_assembler import ItemAssembler
from lootforge.tables.weighted_selector import InvalidDataError

if TYPE_CHECKING:
    from lootforge.observability.run_log import RunLog

logger = logging.getLogger(__name__)


DEFAULT_LOOT_KEY = "default"


class LootGenerator:
    """
    Generation session over a single catalog.

    Not thread-safe: one session per thread, or guard calls with a lock.

    Usage:
        generator = LootGenerator(roller=LootRoller(seed=42))
        generator.load_config(Path("data/loot/example_loot.toml"))
        items = generator.generate_loot(GenerationOptions(number_of_items=5), key="chest")
        again = generator.get_loot("chest")
    """

    def __init__(
        self,
        catalog: Optional[LootCatalog] = None,
        roller: Optional[LootRoller] = None,
        run_log: Optional["RunLog"] = None,
    ):
        """
        Initialize the generator.

        Args:
            catalog: Catalog to generate from (a new empty one if None)
            roller: Random source; pass a seeded LootRoller for reproducible batches
            run_log: Optional run log receiving selection, item and batch events
        """
        self.catalog = catalog if catalog is not None else LootCatalog()
        self.roller = roller or LootRoller()
        self.run_log = run_log
        self._loot: dict[str, list[Item]] = {}
        if run_log is not None:
            run_log.set_seed(self.roller.seed)

    def load_config(self, source: ConfigSource) -> ImportResult:
        """Import a config document into this session's catalog."""
        return import_config(self.catalog, source, run_log=self.run_log)

    def generate_loot(
        self,
        options: GenerationOptions,
        overrides: Optional[GenerationOverrides] = None,
        key: str = DEFAULT_LOOT_KEY,
    ) -> list[Item]:
        """
        Generate a batch of items and store it under a key.

        Args:
            options: Generation options (count, level, affix chance, scaling)
            overrides: Optional forced quality/type/subtype
            key: Name to store the batch under (replaces an earlier batch)

        Returns:
            The generated items

        Raises:
            InvalidDataError: If the catalog cannot supply a quality, type or
                subtype. No items are stored or returned in that case.
        """
        overrides = overrides or GenerationOverrides.empty()
        logger.info(
            f"Generating {options.number_of_items} items for '{key}' "
            f"(level {options.base_level:g}±{options.level_variance:g}, "
            f"{options.scaling_mode.value} x{options.scaling_factor:g})"
        )

        assembler = ItemAssembler(
            self.catalog,
            options,
            overrides=overrides,
            roller=self.roller,
            run_log=self.run_log,
        )
        try:
            items = [assembler.assemble() for _ in range(options.number_of_items)]
        except InvalidDataError as e:
            logger.error(f"Loot generation for '{key}' failed: {e}")
            if self.run_log is not None:
                self.run_log.log_batch(
                    key, options.number_of_items, 0, success=False, error=str(e)
                )
            raise

        self._loot[key] = items
        if self.run_log is not None:
            self.run_log.log_batch(key, options.number_of_items, len(items))
        logger.info(f"Generated {len(items)} items for '{key}'")
        return list(items)

    def generate_loot_json(
        self,
        options: GenerationOptions,
        overrides: Optional[GenerationOverrides] = None,
        key: str = DEFAULT_LOOT_KEY,
        indent: Optional[int] = None,
    ) -> str:
        """Generate a batch and return it as JSON text."""
        return items_to_json(self.generate_loot(options, overrides, key), indent=indent)

    def get_loot(self, key: str = DEFAULT_LOOT_KEY) -> list[Item]:
        """Get a previously generated batch ([] if the key is unknown)."""
        return list(self._loot.get(key, []))

    def get_loot_json(self, key: str = DEFAULT_LOOT_KEY, indent: Optional[int] = None) -> str:
        return items_to_json(self.get_loot(key), indent=indent)

    def loot_keys(self) -> list[str]:
        return list(self._loot)

    def clear_loot(self, key: Optional[str] = None) -> None:
        """Forget one stored batch, or all of them when key is None."""
        if key is None:
            self._loot.clear()
        else:
            self._loot.pop(key, None)


def generate_loot(
    catalog: LootCatalog,
    options: GenerationOptions,
    overrides: Optional[GenerationOverrides] = None,
    roller: Optional[LootRoller] = None,
) -> list[Item]:
    """Generate one batch from a catalog without keeping a session around."""
    return LootGenerator(catalog, roller=roller).generate_loot(options, overrides)
