"""
Cutting Plan API.

POST /api/cutting-plan              — Plan one set of requirements
POST /api/cutting-plan/by-material  — One plan per material group + overall summary
GET  /api/cutting-plan/defaults     — Configured stock length, kerf and policy
"""

import logging
import warnings

from fastapi import APIRouter, HTTPException

from .. import schemas
from ..config import settings
from ..cutting.diagram import build_diagram
from ..cutting.errors import UnplaceablePieceWarning, ValidationError
from ..cutting.grouping import group_requirements, material_weights, plan_by_material
from ..cutting.planner import POLICIES, CuttingPlanner
from ..cutting.requirements import normalize_requirements
from ..units import supported_units

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cutting-plan", tags=["cutting-plan"])


@router.post("", response_model=schemas.CuttingPlan)
def create_cutting_plan(request: schemas.CuttingPlanRequest):
    """
    Plan a single material.

    Unplaceable pieces do not fail the request. They come back in
    `unplaceable` so the UI can flag them.
    """
    try:
        requirements = normalize_requirements(
            [item.as_requirement_dict() for item in request.items]
        )
        with warnings.catch_warnings():
            # Reported in the response body instead
            warnings.simplefilter("ignore", UnplaceablePieceWarning)
            result = CuttingPlanner().plan(
                requirements, request.stock_lengths,
                kerf=request.kerf, policy=request.policy,
            )
    except ValidationError as e:
        logger.info("Rejected cutting plan request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    response = result.to_dict()
    if request.include_diagram:
        response["diagram"] = build_diagram(result)
    return response


@router.post("/by-material", response_model=schemas.GroupedCuttingPlan)
def create_grouped_cutting_plan(request: schemas.GroupedCuttingPlanRequest):
    """
    Plan each material group separately.

    Either send explicit `groups` ({material_key: [items]}) or a flat `items`
    list where each item carries its `material` or `material_key`.
    A `weight` (kg/m) on an item's material fills in `weights_kg_per_m`.
    Explicit groups are planned first, in the order given.
    """
    try:
        groups = {}
        weights = {}
        for key, items in request.groups.items():
            item_dicts = [item.as_requirement_dict() for item in items]
            groups[key] = normalize_requirements(item_dicts)
            weights.update(material_weights(item_dicts, key=key))

        flat_items = [item.as_requirement_dict() for item in request.items]
        for key, requirements in group_requirements(flat_items).items():
            groups.setdefault(key, []).extend(requirements)
        for key, kg_per_m in material_weights(flat_items).items():
            weights.setdefault(key, kg_per_m)

        # Explicit kg/m overrides what the materials carry
        weights.update(request.weights_kg_per_m)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UnplaceablePieceWarning)
            grouped = plan_by_material(
                groups, request.stock_lengths,
                kerf=request.kerf, policy=request.policy,
                weights_kg_per_m=weights,
            )
    except ValidationError as e:
        logger.info("Rejected grouped cutting plan request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    return grouped.to_dict()


@router.get("/defaults", response_model=schemas.PlannerDefaults)
def get_defaults():
    return {
        "stock_length": settings.DEFAULT_STOCK_LENGTH_MM,
        "kerf": settings.KERF_MM,
        "policy": settings.BAR_OPENING_POLICY,
        "policies": list(POLICIES),
        "units": supported_units(),
    }
