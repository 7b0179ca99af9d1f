"""
Per-material cutting plans.

Different cross-sections never share a bar, so a quote with 40x40x2 tube
and 25x25 angle gets one independent plan per material. The grouped plan
also carries an overall summary and, where kg/m is known, the weight of
material actually used.
"""

import logging
import math
from typing import Mapping, Optional

from .models import GroupedCuttingPlan
from .planner import CuttingPlanner
from .requirements import normalize_requirement

logger = logging.getLogger(__name__)

DEFAULT_MATERIAL_KEY = "standard"


def material_key(material: Optional[dict]) -> str:
    """
    Grouping key for a material.

    "<width>x<depth>x<thickness>" when any dimension is known,
    else the material type, else "standard".
    """
    if not material:
        return DEFAULT_MATERIAL_KEY
    dims = [material.get("width"), material.get("depth"), material.get("thickness")]
    if any(d not in (None, "") for d in dims):
        return "x".join("" if d in (None, "") else _format_dim(d) for d in dims)
    return str(material.get("type") or DEFAULT_MATERIAL_KEY)


def group_requirements(items) -> dict:
    """
    Normalise caller items and bucket them by material key.

    Each item may carry a `material` dict (width/depth/thickness/type)
    or an explicit `material_key`. Group order follows first appearance.
    """
    groups: dict[str, list] = {}
    for index, item in enumerate(items or []):
        groups.setdefault(_item_key(item), []).append(normalize_requirement(item, index))
    return groups


def material_weights(items, key: Optional[str] = None) -> dict:
    """
    Collect kg/m from each item's `material["weight"]`, per material key.

    `key` forces every item into one group (explicit groups). The first
    positive weight seen for a key wins; missing or unusable weights are
    skipped so the group simply reports no weight.
    """
    weights: dict[str, float] = {}
    for item in items or []:
        if not isinstance(item, dict):
            continue
        material = item.get("material")
        if not isinstance(material, dict) or material.get("weight") in (None, ""):
            continue
        try:
            kg_per_m = float(str(material["weight"]).strip())
        except ValueError:
            logger.warning("Ignoring material weight %r", material["weight"])
            continue
        if math.isfinite(kg_per_m) and kg_per_m > 0:
            weights.setdefault(key or _item_key(item), kg_per_m)
    return weights


def plan_by_material(groups: Mapping[str, list], stock_options=None,
                     kerf: Optional[float] = None, policy: Optional[str] = None,
                     weights_kg_per_m: Optional[Mapping[str, float]] = None,
                     planner: Optional[CuttingPlanner] = None) -> GroupedCuttingPlan:
    """
    Run one cutting plan per material group.

    Args:
        groups: {material_key: [PieceRequirement, ...]}
        stock_options: stock lengths in mm shared by every group
        kerf, policy: forwarded to the planner
        weights_kg_per_m: optional {material_key: kg per metre}
        planner: planner to use, defaults to one built from settings

    All groups are validated before any is packed, so a bad requirement in
    the last group still raises ValidationError with no partial result.
    """
    planner = planner or CuttingPlanner()
    for key, requirements in groups.items():
        planner.validate_requirements(requirements)

    plans = {}
    for key, requirements in groups.items():
        plans[key] = planner.plan(requirements, stock_options, kerf=kerf, policy=policy)
        logger.info("Material %s: %d bars", key, plans[key].total_bars_used)

    return GroupedCuttingPlan(plans=plans, weights_kg_per_m=dict(weights_kg_per_m or {}))


def _format_dim(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _item_key(item) -> str:
    key = item.get("material_key") if isinstance(item, dict) else None
    if not key:
        key = material_key(item.get("material") if isinstance(item, dict) else None)
    return key
