# Length unit conversion — everything inside the planner works in millimetres

from .cutting.errors import ValidationError

# Millimetres per unit
LENGTH_TO_MM = {
    "mm": 1.0,
    "cm": 10.0,
    "m": 1000.0,
    "inch": 25.4,
    "ft": 304.8,
}

# Spellings seen on quotation line items
UNIT_ALIASES = {
    "in": "inch",
    "inches": "inch",
    '"': "inch",
    "feet": "ft",
    "foot": "ft",
    "'": "ft",
    "meter": "m",
    "meters": "m",
    "millimeter": "mm",
    "millimeters": "mm",
    "centimeter": "cm",
    "centimeters": "cm",
}


def canonical_unit(unit) -> str:
    """Return the canonical unit name, or raise ValidationError if unknown."""
    if unit is None or str(unit).strip() == "":
        return "mm"
    name = str(unit).strip().lower()
    name = UNIT_ALIASES.get(name, name)
    if name not in LENGTH_TO_MM:
        raise ValidationError(
            f"Unknown length unit: {unit!r}. Supported: {supported_units()}"
        )
    return name


def to_mm(value: float, unit: str = "mm") -> float:
    """Convert a length in `unit` to millimetres."""
    return value * LENGTH_TO_MM[canonical_unit(unit)]


def from_mm(value_mm: float, unit: str = "mm") -> float:
    """Convert a length in millimetres to `unit`."""
    return value_mm / LENGTH_TO_MM[canonical_unit(unit)]


def convert_length(value: float, from_unit: str, to_unit: str) -> float:
    """Convert between any two supported units, via millimetres."""
    return from_mm(to_mm(value, from_unit), to_unit)


def supported_units() -> list[str]:
    return list(LENGTH_TO_MM.keys())
