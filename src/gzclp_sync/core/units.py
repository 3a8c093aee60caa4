"""
Weight rounding and kg/lbs conversion.

Hevy stores every weight in kilograms; lbs users see values converted and
snapped to 5 lb plates.
"""

import math

from .config import KG_TO_LBS, LBS_TO_KG, WEIGHT_ROUNDING
from .models import WeightUnit


def snap_to_increment(weight: float, increment: float) -> float:
    """
    Snap a weight to the nearest multiple of ``increment``.

    Halves round up, so 81.25 kg on a 2.5 kg grid becomes 82.5 rather than
    following banker's rounding.
    """
    return math.floor(weight / increment + 0.5) * increment


def round_weight(weight: float, unit: WeightUnit) -> float:
    """Round to the nearest plate increment of the unit (2.5 kg / 5 lbs)."""
    return snap_to_increment(weight, WEIGHT_ROUNDING[unit])


def convert_weight(weight: float, from_unit: WeightUnit, to_unit: WeightUnit) -> float:
    """
    Convert between units, rounding to the target unit's increment.

    Same-unit conversion returns the value untouched.
    """
    if from_unit == to_unit:
        return weight
    if from_unit == "kg":
        return round_weight(weight * KG_TO_LBS, "lbs")
    return round_weight(weight * LBS_TO_KG, "kg")


def to_kg(weight: float, from_unit: WeightUnit) -> float:
    """Convert to kg without rounding."""
    if from_unit == "kg":
        return weight
    return weight * LBS_TO_KG


def get_display_value(weight_kg: float, unit: WeightUnit) -> float:
    """Numeric value shown to the user: kg as-is, lbs snapped to 5."""
    if unit == "kg":
        return weight_kg
    return round_weight(weight_kg * KG_TO_LBS, "lbs")


def format_weight(weight: float, unit: WeightUnit) -> str:
    """Format a weight with its unit suffix, dropping a trailing .0."""
    if float(weight).is_integer():
        return f"{int(weight)} {unit}"
    return f"{weight:.1f} {unit}"


def display_weight(weight_kg: float, unit: WeightUnit) -> str:
    """Convert a stored kg weight to the user's unit and format it."""
    return format_weight(get_display_value(weight_kg, unit), unit)
