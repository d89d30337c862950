"""
Level scaling for item attributes.

Linear mode adds ``level * factor`` to the base value; exponential mode
multiplies it by ``factor ** level``. Results are floored at zero. The
advisory min/max bounds are seeded on first use but never enforced.

Exponential growth that leaves the float range (or zero raised to a
negative level) becomes infinity rather than an error.
"""

import math

from lootforge.data_models import Attribute, ScalingMode


class AttributeScaler:
    """
    Computes scaled attribute values for a generation call.

    One scaler is built per batch from the generation options; it never
    mutates the attribute it is given.
    """

    def __init__(self, mode: ScalingMode = ScalingMode.LINEAR, scaling_factor: float = 1.0):
        self.mode = ScalingMode(mode)
        self.scaling_factor = scaling_factor

    def scale(self, attribute: Attribute, level: float) -> Attribute:
        """
        Return a copy of the attribute with its value scaled to the level.

        Args:
            attribute: Attribute as configured in the catalog
            level: Generated item level

        Returns:
            A new Attribute carrying the scaled initial_value
        """
        scaled = attribute.copy()

        if scaled.min == 0.0 and scaled.max == 0.0 and scaled.initial_value != 0.0:
            scaled.min = scaled.initial_value
            scaled.max = scaled.initial_value

        # Exponential growth of zero stays zero, so start from one
        if scaled.initial_value == 0.0 and self.mode == ScalingMode.EXPONENTIAL:
            scaled.initial_value = 1.0

        if self.mode == ScalingMode.LINEAR:
            scaled.initial_value += level * self.scaling_factor
        else:
            scaled.initial_value *= _growth(self.scaling_factor, level)

        if scaled.initial_value < 0.0:
            scaled.initial_value = 0.0

        return scaled

    def resolve(self, attribute: Attribute, level: float) -> Attribute:
        """
        Scale an attribute, or pin it to the level if it is a requirement.

        Requirement attributes ("strength_requirement", "level_requirement")
        represent the minimum level needed to use the item and are set to
        exactly the generated level.
        """
        if attribute.is_requirement:
            pinned = attribute.copy()
            pinned.set_initial_value(level)
            return pinned
        return self.scale(attribute, level)


def scale_attribute(
    attribute: Attribute,
    level: float,
    mode: ScalingMode = ScalingMode.LINEAR,
    scaling_factor: float = 1.0,
) -> Attribute:
    """Scale a single attribute without building a scaler."""
    return AttributeScaler(mode, scaling_factor).scale(attribute, level)


def _growth(factor: float, level: float) -> float:
    """factor ** level, saturating to +/-infinity instead of raising."""
    if factor == 0.0 and level < 0:
        return math.inf
    try:
        return math.pow(factor, level)
    except OverflowError:
        # odd integral levels keep the sign of a negative factor
        if factor < 0 and float(level).is_integer() and int(level) % 2 == 1:
            return -math.inf
        return math.inf
