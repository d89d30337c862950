"""
Item assembly: turns catalog configuration into one generated item.

Assembly order:
1. Quality, type and subtype (override or weighted selection)
2. Name from the (type, subtype) name list, falling back to the subtype
3. Prefix/suffix rolls and picks from the pooled scopes
4. Item level within base_level +/- level_variance
5. Required attributes from the four scopes, in scope order
6. Optional attributes, each kept on an affix_chance roll
7. Prefix attributes, then suffix attributes
8. Subtype metadata, then per-name metadata
"""

import copy
import logging
from typing import Optional, TYPE_CHECKING

from lootforge.catalog.loot_catalog import LootCatalog, resolve_scopes
from lootforge.data_models import (
    LEVEL_ATTRIBUTE,
    Affix,
    Attribute,
    GenerationOptions,
    GenerationOverrides,
    Item,
    LootRoller,
)
from lootforge.items.attribute_scaler import AttributeScaler
from lootforge.tables.weighted_selector import WeightedSelector

if TYPE_CHECKING:
    from lootforge.observability.run_log import RunLog

logger = logging.getLogger(__name__)


class ItemAssembler:
    """
    Builds fully populated items from a catalog.

    The assembler only reads the catalog. Everything placed on an item is a
    copy, so editing a generated item never leaks back into configuration.

    Usage:
        assembler = ItemAssembler(catalog, options, roller=LootRoller(seed=1))
        item = assembler.assemble()
    """

    def __init__(
        self,
        catalog: LootCatalog,
        options: GenerationOptions,
        overrides: Optional[GenerationOverrides] = None,
        roller: Optional[LootRoller] = None,
        run_log: Optional["RunLog"] = None,
    ):
        """
        Initialize the assembler.

        Args:
            catalog: Catalog to read configuration from
            options: Generation options for the batch
            overrides: Forced quality/type/subtype (empty strings mean roll)
            roller: Random source shared by every draw of this assembler
            run_log: Optional run log for selection and item events
        """
        self.catalog = catalog
        self.options = options
        self.overrides = overrides or GenerationOverrides.empty()
        self.roller = roller or LootRoller()
        self.run_log = run_log
        self.selector = WeightedSelector(self.roller, run_log)
        self.scaler = AttributeScaler(options.scaling_mode, options.scaling_factor)

    def assemble(self) -> Item:
        """
        Generate one item.

        Returns:
            The generated Item

        Raises:
            InvalidDataError: If quality, type or subtype selection is
                attempted on an empty or zero-weight table
        """
        quality = self._select_quality()
        item_type = self._select_item_type()
        subtype = self._select_subtype(item_type)
        name = self._select_name(item_type, subtype)
        prefix, suffix = self._select_affixes(item_type, subtype)

        item = Item(
            name=name,
            quality=quality,
            item_type=item_type,
            subtype=subtype,
            prefix=prefix,
            suffix=suffix,
        )

        level = self._roll_level()
        item.set_attribute(LEVEL_ATTRIBUTE, Attribute(LEVEL_ATTRIBUTE, level))

        self._apply_attributes(item, level)
        self._apply_affix(item, item.prefix, level)
        self._apply_affix(item, item.suffix, level)
        self._apply_metadata(item)

        logger.debug(
            f"Assembled {item.display_name} ({quality} {item_type}/{subtype}, level {level:g})"
        )
        if self.run_log is not None:
            self.run_log.log_item(
                name=item.name,
                quality=quality,
                item_type=item_type,
                subtype=subtype,
                level=level,
                prefix=item.prefix.name,
                suffix=item.suffix.name,
            )
        return item

    # =========================================================================
    # SELECTION
    # =========================================================================

    def _select_quality(self) -> str:
        if self.overrides.quality:
            if not self.catalog.has_quality(self.overrides.quality):
                logger.warning(f"Quality override '{self.overrides.quality}' is not in the catalog")
            return self.overrides.quality
        return self.selector.select(self.catalog.get_quality_data(), "quality")

    def _select_item_type(self) -> str:
        if self.overrides.item_type:
            if not self.catalog.has_item_type(self.overrides.item_type):
                logger.warning(f"Type override '{self.overrides.item_type}' is not in the catalog")
            return self.overrides.item_type
        return self.selector.select(self.catalog.get_item_type_weights(), "item_type")

    def _select_subtype(self, item_type: str) -> str:
        if self.overrides.subtype:
            return self.overrides.subtype
        # A forced type that the catalog does not know has no subtypes to roll
        if not self.catalog.has_item_type(item_type):
            return ""
        return self.selector.select(
            self.catalog.get_subtype_weights(item_type), f"subtype:{item_type}"
        )

    def _select_name(self, item_type: str, subtype: str) -> str:
        names = self.catalog.get_item_names(item_type, subtype)
        if not names:
            return subtype
        return self.roller.choice(names, f"name:{item_type}/{subtype}")

    def _select_affixes(self, item_type: str, subtype: str) -> tuple[Affix, Affix]:
        """
        Roll for a prefix and a suffix and pick each from its pooled scopes.

        Pools are concatenated across scopes without de-duplication: an affix
        defined at two scopes is twice as likely to be picked.
        """
        want_prefix = self.roller.roll_chance(self.options.affix_chance, "prefix chance")
        want_suffix = self.roller.roll_chance(self.options.affix_chance, "suffix chance")

        prefix = Affix.empty()
        suffix = Affix.empty()
        if not (want_prefix or want_suffix):
            return prefix, suffix

        prefix_pool: list[Affix] = []
        suffix_pool: list[Affix] = []
        for scope in resolve_scopes(item_type, subtype):
            if want_prefix:
                prefix_pool.extend(self.catalog.get_prefixes(*scope))
            if want_suffix:
                suffix_pool.extend(self.catalog.get_suffixes(*scope))

        if want_prefix and prefix_pool:
            prefix = self.roller.choice(prefix_pool, "prefix")
        if want_suffix and suffix_pool:
            suffix = self.roller.choice(suffix_pool, "suffix")
        return prefix, suffix

    def _roll_level(self) -> float:
        low, high = self.options.level_range
        return float(self.roller.randint(low, high, "item level"))

    # =========================================================================
    # ATTRIBUTES
    # =========================================================================

    def _apply_attributes(self, item: Item, level: float) -> None:
        """
        Apply required attributes immediately and optional ones on a roll.

        Required attributes are written scope by scope, so a more specific
        scope overwrites a same-named attribute from a more general one.
        """
        optional: list[Attribute] = []
        for scope in resolve_scopes(item.item_type, item.subtype):
            for attribute in self.catalog.get_attributes(*scope):
                if attribute.required:
                    item.set_attribute(attribute.name, self.scaler.resolve(attribute, level))
                else:
                    optional.append(attribute)

        for attribute in optional:
            if not self.roller.roll_chance(self.options.affix_chance, f"optional {attribute.name}"):
                continue
            existing = item.get_attribute(attribute.name)
            if existing is not None:
                final = existing.copy()
                final.initial_value += attribute.initial_value
            elif attribute.is_requirement:
                final = attribute.copy()
            else:
                final = self.scaler.scale(attribute, level)

            if final.is_requirement:
                final.set_initial_value(level)
            item.set_attribute(attribute.name, final)

    def _apply_affix(self, item: Item, affix: Affix, level: float) -> None:
        """Merge an affix's attributes onto the item (unscaled contributions)."""
        for attribute in affix.attributes:
            existing = item.get_attribute(attribute.name)
            if existing is not None:
                final = existing.copy()
                final.initial_value += attribute.initial_value
            else:
                final = attribute.copy()

            if final.is_requirement:
                final.set_initial_value(level)
            item.set_attribute(attribute.name, final)

    # =========================================================================
    # METADATA
    # =========================================================================

    def _apply_metadata(self, item: Item) -> None:
        """Subtype tags first, then per-name tags (which win on shared keys)."""
        for key, value in self.catalog.get_all_subtype_metadata(item.item_type, item.subtype).items():
            item.set_metadata(key, copy.deepcopy(value))
        name_metadata = self.catalog.get_all_item_name_metadata(
            item.item_type, item.subtype, item.name
        )
        for key, value in name_metadata.items():
            item.set_metadata(key, copy.deepcopy(value))
