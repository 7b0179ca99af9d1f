"""
Cutting plan data model.

Inputs (PieceRequirement) are immutable. Outputs (Bar, CuttingPlanResult) are
built once per planning call and never mutated afterwards. Every output type
has a to_dict() so callers can store or ship the plan as plain data.

All lengths are millimetres.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Float slack allowed when checking whether a piece fits a bar
FIT_TOLERANCE_MM = 1e-6

REASON_LONGER_THAN_STOCK = "longer_than_stock"
REASON_KERF_EXCEEDS_STOCK = "kerf_exceeds_stock"


@dataclass(frozen=True)
class PieceRequirement:
    length: float
    quantity: int = 1
    tag: Any = None


@dataclass(frozen=True)
class PlacedPiece:
    length: float
    tag: Any = None
    requirement_index: int = 0

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "tag": self.tag,
            "requirement_index": self.requirement_index,
        }


@dataclass(frozen=True)
class UnplaceablePiece:
    """One piece instance that cannot be cut from any stock option."""

    length: float
    tag: Any = None
    requirement_index: int = 0
    reason: str = REASON_LONGER_THAN_STOCK

    def to_dict(self) -> dict:
        return {
            "length": self.length,
            "tag": self.tag,
            "requirement_index": self.requirement_index,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Bar:
    """One stock bar and the pieces cut from it, in cutting order."""

    number: int
    stock_length: float
    placed_pieces: tuple = ()
    kerf: float = 0.0

    @property
    def used_length(self) -> float:
        return sum(p.length for p in self.placed_pieces)

    @property
    def kerf_length(self) -> float:
        return self.kerf * len(self.placed_pieces)

    @property
    def waste_length(self) -> float:
        waste = self.stock_length - self.used_length - self.kerf_length
        if -FIT_TOLERANCE_MM < waste < 0:
            return 0.0
        return waste

    @property
    def waste_percentage(self) -> float:
        return self.waste_length / self.stock_length * 100.0

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "stock_length": self.stock_length,
            "placed_pieces": [p.to_dict() for p in self.placed_pieces],
            "piece_count": len(self.placed_pieces),
            "used_length": round(self.used_length, 3),
            "kerf_length": round(self.kerf_length, 3),
            "waste_length": round(self.waste_length, 3),
            "waste_percentage": round(self.waste_percentage, 2),
        }


@dataclass(frozen=True)
class CuttingPlanResult:
    bars: tuple = ()
    unplaceable: tuple = ()
    stock_options: tuple = ()
    kerf: float = 0.0
    policy: str = "largest"

    @property
    def total_bars_used(self) -> int:
        return len(self.bars)

    @property
    def total_pieces(self) -> int:
        return sum(len(b.placed_pieces) for b in self.bars)

    @property
    def total_used_length(self) -> float:
        return sum(b.used_length for b in self.bars)

    @property
    def total_kerf_length(self) -> float:
        return sum(b.kerf_length for b in self.bars)

    @property
    def total_stock_length(self) -> float:
        return sum(b.stock_length for b in self.bars)

    @property
    def total_waste(self) -> float:
        return sum(b.waste_length for b in self.bars)

    @property
    def waste_percentage(self) -> float:
        """Waste as a share of all stock consumed. 0 when no bars were used."""
        stock = self.total_stock_length
        if not stock:
            return 0.0
        return self.total_waste / stock * 100.0

    @property
    def has_unplaceable(self) -> bool:
        return len(self.unplaceable) > 0

    def bar_counts_by_stock_length(self) -> dict:
        """How many bars of each stock length the plan consumes (purchase list)."""
        counts: dict[float, int] = {}
        for bar in self.bars:
            counts[bar.stock_length] = counts.get(bar.stock_length, 0) + 1
        return dict(sorted(counts.items()))

    def to_dict(self) -> dict:
        return {
            "bars": [b.to_dict() for b in self.bars],
            "unplaceable": [u.to_dict() for u in self.unplaceable],
            "stock_options": list(self.stock_options),
            "kerf": self.kerf,
            "policy": self.policy,
            "total_bars_used": self.total_bars_used,
            "total_pieces": self.total_pieces,
            "total_used_length": round(self.total_used_length, 3),
            "total_kerf_length": round(self.total_kerf_length, 3),
            "total_stock_length": round(self.total_stock_length, 3),
            "total_waste": round(self.total_waste, 3),
            "waste_percentage": round(self.waste_percentage, 2),
            "bars_by_stock_length": [
                {"stock_length": length, "count": count}
                for length, count in self.bar_counts_by_stock_length().items()
            ],
        }


@dataclass(frozen=True)
class GroupedCuttingPlan:
    """Independent plans per material cross-section plus an overall summary."""

    plans: dict = field(default_factory=dict)
    weights_kg_per_m: dict = field(default_factory=dict)

    def weight_kg(self, key: str) -> Optional[float]:
        kg_per_m = self.weights_kg_per_m.get(key)
        if not kg_per_m:
            return None
        return self.plans[key].total_used_length / 1000.0 * kg_per_m

    def summary(self) -> dict:
        total_stock = sum(p.total_stock_length for p in self.plans.values())
        total_waste = sum(p.total_waste for p in self.plans.values())
        weights = [self.weight_kg(k) for k in self.plans]
        known_weights = [w for w in weights if w is not None]
        return {
            "groups": len(self.plans),
            "total_pieces": sum(p.total_pieces for p in self.plans.values()),
            "total_bars_used": sum(p.total_bars_used for p in self.plans.values()),
            "total_used_length": round(sum(p.total_used_length for p in self.plans.values()), 3),
            "total_stock_length": round(total_stock, 3),
            "total_waste": round(total_waste, 3),
            "waste_percentage": round(total_waste / total_stock * 100.0, 2) if total_stock else 0.0,
            "unplaceable_count": sum(len(p.unplaceable) for p in self.plans.values()),
            "total_weight_kg": round(sum(known_weights), 2) if known_weights else None,
        }

    def to_dict(self) -> dict:
        groups = {}
        for key, plan in self.plans.items():
            entry = plan.to_dict()
            weight = self.weight_kg(key)
            entry["weight_kg"] = round(weight, 2) if weight is not None else None
            groups[key] = entry
        return {"groups": groups, "summary": self.summary()}
