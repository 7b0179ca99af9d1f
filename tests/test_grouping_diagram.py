"""
Per-material plans + diagram data tests.

Tests:
1-4.  Material keys, grouping of line items and material weights
5-7.  plan_by_material (independent plans, summary, weights, validation)
8-10. Diagram segments (kerf gaps, offcut, zero kerf)
"""

import pytest

from cutplanner.cutting.diagram import build_diagram
from cutplanner.cutting.errors import ValidationError
from cutplanner.cutting.grouping import (
    group_requirements,
    material_key,
    material_weights,
    plan_by_material,
)
from cutplanner.cutting.models import PieceRequirement


# ============================================================
# Material keys
# ============================================================

def test_material_key_from_dimensions_type_or_default():
    assert material_key({"width": 40, "depth": 40, "thickness": 2}) == "40x40x2"
    assert material_key({"width": 40.0, "depth": 20.0, "thickness": 1.5}) == "40x20x1.5"
    assert material_key({"width": 25}) == "25xx"
    assert material_key({"type": "angle"}) == "angle"
    assert material_key({}) == "standard"
    assert material_key(None) == "standard"


def test_group_requirements_buckets_by_material():
    items = [
        {"size": 1500, "quantity": 2, "material": {"width": 40, "depth": 40, "thickness": 2}},
        {"size": 900, "quantity": 1, "material": {"type": "flat"}},
        {"size": 1200, "quantity": 3, "material": {"width": 40, "depth": 40, "thickness": 2}},
        {"size": 600, "quantity": 1},
        {"size": 300, "quantity": 1, "material_key": "flat"},
    ]
    groups = group_requirements(items)
    assert list(groups.keys()) == ["40x40x2", "flat", "standard"]
    assert [r.length for r in groups["40x40x2"]] == [1500, 1200]
    assert [r.length for r in groups["flat"]] == [900, 300]


def test_group_requirements_rejects_bad_items():
    with pytest.raises(ValidationError):
        group_requirements([{"size": "x"}])


def test_material_weights_collected_per_key():
    items = [
        {"size": 1500, "material": {"width": 40, "depth": 40, "thickness": 2, "weight": 2.0}},
        {"size": 900, "material": {"type": "flat", "weight": "0.75"}},
        {"size": 600, "material": {"type": "angle", "weight": "n/a"}},
        {"size": 300, "material": {"type": "bar", "weight": 0}},
        {"size": 200},
    ]
    assert material_weights(items) == {"40x40x2": 2.0, "flat": 0.75}
    assert material_weights(items[:2], key="mixed") == {"mixed": 2.0}


# ============================================================
# plan_by_material
# ============================================================

def _two_material_groups():
    return {
        "40x40x2": [PieceRequirement(1500, 4, "rail")],
        "25x25x3": [PieceRequirement(2000, 3, "post")],
    }


def test_plan_by_material_plans_groups_independently(planner):
    grouped = plan_by_material(_two_material_groups(), [6000], kerf=5, planner=planner)
    assert list(grouped.plans.keys()) == ["40x40x2", "25x25x3"]

    rails = grouped.plans["40x40x2"]
    assert rails.total_bars_used == 2
    assert rails.total_waste == pytest.approx(5980)

    posts = grouped.plans["25x25x3"]
    assert [len(b.placed_pieces) for b in posts.bars] == [2, 1]
    assert posts.total_waste == pytest.approx(1990 + 3995)


def test_grouped_summary_and_weights(planner):
    grouped = plan_by_material(_two_material_groups(), [6000], kerf=5,
                               weights_kg_per_m={"40x40x2": 2.0}, planner=planner)
    summary = grouped.summary()
    assert summary["groups"] == 2
    assert summary["total_pieces"] == 7
    assert summary["total_bars_used"] == 4
    assert summary["total_stock_length"] == 24000
    assert summary["total_waste"] == pytest.approx(11965)
    assert summary["waste_percentage"] == round(11965 / 24000 * 100, 2)
    assert summary["unplaceable_count"] == 0
    # 6 m of rail used at 2 kg/m; posts have no weight on file
    assert summary["total_weight_kg"] == pytest.approx(12.0)
    assert grouped.weight_kg("25x25x3") is None

    data = grouped.to_dict()
    assert data["groups"]["40x40x2"]["weight_kg"] == 12.0
    assert data["groups"]["25x25x3"]["weight_kg"] is None
    assert data["summary"] == summary


def test_bad_line_in_later_group_fails_before_packing(planner):
    groups = _two_material_groups()
    groups["flat"] = [PieceRequirement(500, -1, "broken")]
    with pytest.raises(ValidationError, match="broken"):
        plan_by_material(groups, [6000], planner=planner)


def test_empty_groups_give_zero_summary(planner):
    summary = plan_by_material({}, [6000], planner=planner).summary()
    assert summary["total_bars_used"] == 0
    assert summary["waste_percentage"] == 0.0
    assert summary["total_weight_kg"] is None


# ============================================================
# Diagram segments
# ============================================================

def test_diagram_lays_out_pieces_kerf_and_offcut(planner):
    result = planner.plan([PieceRequirement(1500, 4, "rail")], [6000], kerf=5)
    diagram = build_diagram(result)
    assert [d["bar_number"] for d in diagram] == [1, 2]

    segments = diagram[0]["segments"]
    assert [s["type"] for s in segments] == [
        "piece", "kerf", "piece", "kerf", "piece", "kerf", "waste",
    ]
    assert [s["start"] for s in segments] == [0, 1500, 1505, 3005, 3010, 4510, 4515]
    assert segments[0]["tag"] == "rail"
    assert segments[0]["percentage"] == 25.0
    assert segments[-1]["length"] == 1485
    assert sum(s["length"] for s in segments) == pytest.approx(6000)


def test_diagram_without_kerf_or_offcut(planner):
    result = planner.plan([PieceRequirement(3000, 2)], [6000], kerf=0)
    segments = build_diagram(result)[0]["segments"]
    assert [s["type"] for s in segments] == ["piece", "piece"]
    assert [s["start"] for s in segments] == [0, 3000]


def test_diagram_of_empty_plan_is_empty(planner):
    assert build_diagram(planner.plan([], [6000])) == []
