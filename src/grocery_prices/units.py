"""Unit price normalization across measurement units."""

from .models import Unit

# Small retail units and the standard unit they are compared in
_RESCALED_UNITS: dict[Unit, tuple[float, Unit]] = {
    Unit.GRAM: (1000.0, Unit.KILOGRAM),
    Unit.MILLILITER: (1000.0, Unit.LITER),
}


class UnknownUnitError(ValueError):
    """Raised when a value is not a known measurement unit."""

    def __init__(self, unit: object):
        self.unit = unit
        super().__init__(f"Unknown unit '{unit}'")


def coerce_unit(unit: Unit | str) -> Unit:
    """Return ``unit`` as a Unit, failing loudly for anything unknown."""
    if isinstance(unit, Unit):
        return unit
    try:
        return Unit(unit)
    except ValueError:
        raise UnknownUnitError(unit) from None


def normalize(unit_price: float, unit: Unit | str) -> tuple[float, Unit]:
    """Rescale a unit price to the unit it is compared in.

    Grams become kilograms and milliliters become liters (x1000); every
    other unit is returned unchanged.

    Args:
        unit_price: Price per ``unit``
        unit: Unit the price was recorded in

    Returns:
        Tuple of (normalized price, display unit)

    Raises:
        UnknownUnitError: If ``unit`` is not a Unit
    """
    unit = coerce_unit(unit)
    factor, display_unit = _RESCALED_UNITS.get(unit, (1.0, unit))
    return unit_price * factor, display_unit


def format_unit_price(unit_price: float, unit: Unit | str) -> str:
    """Format a unit price in its comparison unit, e.g. '€2.50 per kg'."""
    value, display_unit = normalize(unit_price, unit)
    return f"€{value:.2f} per {display_unit.label}"
