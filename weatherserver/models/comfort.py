"""Coarse comfort category derived from a Fahrenheit temperature."""

from enum import StrEnum

COLD_BELOW_F = 40.0
HOT_FROM_F = 80.0


class ComfortCategory(StrEnum):
    COLD = "cold"
    MODERATE = "moderate"
    HOT = "hot"


def categorize(temperature_f: float) -> ComfortCategory:
    """Map a temperature to a category. 40 is moderate, 80 is hot."""
    if temperature_f < COLD_BELOW_F:
        return ComfortCategory.COLD
    if temperature_f < HOT_FROM_F:
        return ComfortCategory.MODERATE
    return ComfortCategory.HOT
