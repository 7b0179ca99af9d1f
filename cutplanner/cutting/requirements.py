"""
Requirement normalisation — caller line items to PieceRequirement.

Grill, pergola and window builders hand over requirement dicts like:
    {"size": 4.5, "unit": "ft", "quantity": 6,
     "itemType": "Vertical bar", "description": "Front grill"}

Sizes are converted to millimetres here so the planner only ever sees mm.
"""

import logging

from ..units import to_mm
from .errors import ValidationError
from .models import PieceRequirement

logger = logging.getLogger(__name__)


def build_tag(item_type=None, description=None):
    """Reporting tag for a piece: "<itemType>: <description>", either part alone, or None."""
    item_type = str(item_type).strip() if item_type else ""
    description = str(description).strip() if description else ""
    if item_type and description:
        return "%s: %s" % (item_type, description)
    return item_type or description or None


def normalize_requirement(item: dict, index: int = 0) -> PieceRequirement:
    """
    Convert one caller requirement dict into a PieceRequirement in mm.

    Accepts `size` (or `length`), `unit` (default mm), `quantity` (default 1),
    `itemType`/`item_type` and `description`. An explicit `tag` wins over
    the one built from itemType + description.
    """
    if not isinstance(item, dict):
        raise ValidationError(f"Requirement #{index} must be a dict, got {item!r}")

    raw_size = item.get("size", item.get("length"))
    try:
        size = float(str(raw_size).strip())
    except (ValueError, TypeError):
        raise ValidationError(f"Requirement #{index}: size is not a number: {raw_size!r}")

    length_mm = to_mm(size, item.get("unit") or "mm")

    quantity = item.get("quantity", 1)
    if isinstance(quantity, str):
        try:
            quantity = float(quantity.strip())
        except ValueError:
            raise ValidationError(f"Requirement #{index}: quantity is not a number: {quantity!r}")

    tag = item.get("tag")
    if tag is None:
        tag = build_tag(item.get("itemType", item.get("item_type")), item.get("description"))

    # Range checks (positive length, whole quantity) happen in the planner
    return PieceRequirement(length=length_mm, quantity=quantity, tag=tag)


def normalize_requirements(items) -> list:
    """Normalise a list of caller requirement dicts."""
    requirements = [normalize_requirement(item, i) for i, item in enumerate(items or [])]
    logger.debug("Normalised %d requirement(s)", len(requirements))
    return requirements
