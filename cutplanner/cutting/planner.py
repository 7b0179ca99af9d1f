"""
Cutting planner — assigns required pieces to stock bars.

First-fit decreasing with a kerf allowance charged once per piece placed:

1. Expand each requirement into `quantity` piece instances.
   Pieces that cannot be cut from any stock option (even alone) are set
   aside on result.unplaceable instead of being packed.
2. Stable sort by length, longest first. Equal lengths keep requirement order.
3. Open a bar, fill it, seal it, repeat until no pieces remain:
   - bar length comes from the opening policy ("largest" always opens the
     longest stock option, "smallest_fit" opens the shortest option that
     still holds the longest remaining piece)
   - "best_single_length" packs the whole job once per stock length that
     holds every piece and keeps the plan with the lowest waste percentage
     (ties go to the shorter length)
   - filling is two ordered passes per placement: exact fit first
     (piece + kerf uses up the remaining capacity), otherwise the longest
     piece that still fits
4. Totals are derived from the sealed bars.

Pure function of its inputs. The planner only holds configuration.
"""

import logging
import math
import numbers
import warnings
from typing import Iterable, Optional

from ..config import settings
from .errors import UnplaceablePieceWarning, ValidationError
from .models import (
    FIT_TOLERANCE_MM,
    REASON_KERF_EXCEEDS_STOCK,
    REASON_LONGER_THAN_STOCK,
    Bar,
    CuttingPlanResult,
    PieceRequirement,
    PlacedPiece,
    UnplaceablePiece,
)

logger = logging.getLogger(__name__)

POLICY_LARGEST = "largest"
POLICY_SMALLEST_FIT = "smallest_fit"
POLICY_BEST_SINGLE_LENGTH = "best_single_length"
POLICIES = (POLICY_LARGEST, POLICY_SMALLEST_FIT, POLICY_BEST_SINGLE_LENGTH)


class CuttingPlanner:
    """
    Usage:
        planner = CuttingPlanner(kerf=5.0)
        result = planner.plan(requirements, stock_options=[6000, 5800])
        if result.unplaceable:
            # tell the user which pieces need longer stock
    """

    def __init__(self, kerf: Optional[float] = None, policy: Optional[str] = None,
                 default_stock_length: Optional[float] = None):
        self.kerf = self._check_kerf(settings.KERF_MM if kerf is None else kerf)
        self.policy = self._check_policy(
            settings.BAR_OPENING_POLICY if policy is None else policy
        )
        self.default_stock_length = (
            settings.DEFAULT_STOCK_LENGTH_MM
            if default_stock_length is None else default_stock_length
        )
        if not _is_positive_length(self.default_stock_length):
            raise ValidationError(
                f"Default stock length must be positive, got {self.default_stock_length!r}"
            )

    def plan(self, requirements: Iterable[PieceRequirement],
             stock_options=None, kerf: Optional[float] = None,
             policy: Optional[str] = None) -> CuttingPlanResult:
        """
        Build a cutting plan.

        Args:
            requirements: PieceRequirement list (lengths in mm)
            stock_options: available stock lengths in mm. A single number is
                accepted; None means the configured default length
            kerf: per-piece saw allowance in mm, defaults to the planner's
            policy: bar opening policy, defaults to the planner's

        Returns:
            CuttingPlanResult

        Raises:
            ValidationError: malformed requirement, kerf, policy or stock list.
                Nothing is packed when this is raised.
        """
        kerf = self.kerf if kerf is None else self._check_kerf(kerf)
        policy = self.policy if policy is None else self._check_policy(policy)
        stock = self.collapse_stock_options(stock_options)
        requirements = self.validate_requirements(requirements)

        pieces, unplaceable = self._expand(requirements, stock, kerf)
        if unplaceable:
            warnings.warn(
                "%d piece(s) cannot be cut from any stock option (max %.1f mm) and were left out"
                % (len(unplaceable), stock[-1]),
                UnplaceablePieceWarning,
                stacklevel=2,
            )

        if policy == POLICY_BEST_SINGLE_LENGTH:
            bars = self._pack_best_single_length(pieces, stock, kerf)
        else:
            bars = self._pack(pieces, stock, kerf, policy)
        result = CuttingPlanResult(
            bars=tuple(bars),
            unplaceable=tuple(unplaceable),
            stock_options=tuple(stock),
            kerf=kerf,
            policy=policy,
        )
        logger.info(
            "Cutting plan: %d pieces in %d bars, waste %.1f mm (%.2f%%), %d unplaceable",
            result.total_pieces, result.total_bars_used, result.total_waste,
            result.waste_percentage, len(unplaceable),
        )
        return result

    # --- Input validation ---

    def collapse_stock_options(self, stock_options) -> list:
        """
        Normalise stock options to a sorted list of distinct positive lengths.

        None or an empty list falls back to the default stock length.
        Non-positive or non-numeric entries are dropped with a warning;
        if nothing is left, ValidationError.
        """
        if stock_options is None:
            return [float(self.default_stock_length)]
        if isinstance(stock_options, numbers.Real) and not isinstance(stock_options, bool):
            stock_options = [stock_options]
        stock_options = list(stock_options)
        if not stock_options:
            return [float(self.default_stock_length)]

        valid = set()
        for length in stock_options:
            if _is_positive_length(length):
                valid.add(float(length))
            else:
                logger.warning("Ignoring invalid stock length %r", length)
        if not valid:
            raise ValidationError(
                f"At least one valid stock length must be provided, got {stock_options!r}"
            )
        return sorted(valid)

    def validate_requirements(self, requirements) -> list:
        """Check every requirement up front. Returns them as a list of PieceRequirement."""
        if requirements is None:
            return []
        checked = []
        for index, req in enumerate(requirements):
            if isinstance(req, dict):
                req = PieceRequirement(
                    length=req.get("length"),
                    quantity=req.get("quantity", 1),
                    tag=req.get("tag"),
                )
            if not isinstance(req, PieceRequirement):
                raise ValidationError(
                    f"Requirement #{index} is not a PieceRequirement: {req!r}"
                )
            if not _is_positive_length(req.length):
                raise ValidationError(
                    f"Requirement #{index} ({req.tag!r}): length must be a positive number, "
                    f"got {req.length!r}"
                )
            quantity = _whole_quantity(req.quantity)
            if quantity is None:
                raise ValidationError(
                    f"Requirement #{index} ({req.tag!r}): quantity must be a whole number >= 1, "
                    f"got {req.quantity!r}"
                )
            checked.append(PieceRequirement(float(req.length), quantity, req.tag))
        return checked

    def _check_kerf(self, kerf) -> float:
        if isinstance(kerf, bool) or not isinstance(kerf, numbers.Real) \
                or not math.isfinite(kerf) or kerf < 0:
            raise ValidationError(f"Kerf must be a non-negative number, got {kerf!r}")
        return float(kerf)

    def _check_policy(self, policy) -> str:
        if policy not in POLICIES:
            raise ValidationError(
                f"Unknown bar opening policy: {policy!r}. Available: {list(POLICIES)}"
            )
        return policy

    # --- Packing ---

    def _expand(self, requirements: list, stock: list, kerf: float) -> tuple:
        """Expand quantities into piece instances, longest first. Splits off unplaceable ones."""
        longest_stock = stock[-1]
        pieces = []
        unplaceable = []
        for index, req in enumerate(requirements):
            if req.length > longest_stock + FIT_TOLERANCE_MM:
                reason = REASON_LONGER_THAN_STOCK
            elif req.length + kerf > longest_stock + FIT_TOLERANCE_MM:
                reason = REASON_KERF_EXCEEDS_STOCK
            else:
                reason = None

            if reason:
                logger.warning(
                    "Piece %r of %.1f mm x%d cannot be cut from stock up to %.1f mm (%s)",
                    req.tag, req.length, req.quantity, longest_stock, reason,
                )
                unplaceable.extend(
                    UnplaceablePiece(req.length, req.tag, index, reason)
                    for _ in range(req.quantity)
                )
                continue

            pieces.extend(
                PlacedPiece(req.length, req.tag, index) for _ in range(req.quantity)
            )

        # sorted() is stable, so equal lengths keep requirement order
        pieces = sorted(pieces, key=lambda p: p.length, reverse=True)
        return pieces, unplaceable

    def _pack(self, pieces: list, stock: list, kerf: float, policy: str) -> list:
        bars = []
        remaining = pieces
        while remaining:
            stock_length = self._opening_length(remaining[0], stock, kerf, policy)
            # _expand dropped anything that cannot fit the opening length,
            # so every fresh bar takes at least the longest remaining piece
            placed, remaining = self._fill_bar(remaining, stock_length, kerf)
            bar = Bar(
                number=len(bars) + 1,
                stock_length=stock_length,
                placed_pieces=tuple(placed),
                kerf=kerf,
            )
            logger.debug(
                "Bar %d (%.1f mm): %s, waste %.1f mm",
                bar.number, stock_length, [p.length for p in placed], bar.waste_length,
            )
            bars.append(bar)
        return bars

    def _pack_best_single_length(self, pieces: list, stock: list, kerf: float) -> list:
        """
        Pack everything into one stock length per candidate and keep the
        plan with the lowest waste percentage. `stock` is ascending, so on a
        tie the shorter length wins.
        """
        if not pieces:
            return []
        needed = pieces[0].length + kerf
        best_bars = None
        best_percentage = None
        for length in stock:
            if needed > length + FIT_TOLERANCE_MM:
                continue
            bars = self._pack(pieces, [length], kerf, POLICY_LARGEST)
            total_stock = sum(bar.stock_length for bar in bars)
            percentage = sum(bar.waste_length for bar in bars) / total_stock * 100.0
            logger.debug("Single length %.1f mm: %d bars, waste %.2f%%",
                         length, len(bars), percentage)
            if best_percentage is None or percentage < best_percentage - FIT_TOLERANCE_MM:
                best_bars, best_percentage = bars, percentage
        return best_bars

    def _opening_length(self, longest_piece: PlacedPiece, stock: list,
                        kerf: float, policy: str) -> float:
        """Stock length for a new bar. `stock` is ascending."""
        if policy == POLICY_SMALLEST_FIT:
            needed = longest_piece.length + kerf
            for length in stock:
                if needed <= length + FIT_TOLERANCE_MM:
                    return length
        return stock[-1]

    def _fill_bar(self, pieces: list, stock_length: float, kerf: float) -> tuple:
        """
        Greedily fill one bar. `pieces` must be sorted longest first.
        Returns (placed pieces in cutting order, pieces left over).
        """
        pool = list(pieces)
        placed = []
        capacity = stock_length
        while pool:
            index = _find_exact_fit(pool, capacity, kerf)
            if index is None:
                index = _find_best_fit(pool, capacity, kerf)
            if index is None:
                break
            piece = pool.pop(index)
            placed.append(piece)
            capacity -= piece.length + kerf
        return placed, pool


def plan(requirements: Iterable[PieceRequirement], stock_options=None,
         kerf: Optional[float] = None, policy: Optional[str] = None) -> CuttingPlanResult:
    """Plan with a planner built from the current settings."""
    return CuttingPlanner().plan(requirements, stock_options, kerf=kerf, policy=policy)


def _find_exact_fit(pool: list, capacity: float, kerf: float) -> Optional[int]:
    """Index of the first piece that uses up the capacity exactly, or None."""
    for i, piece in enumerate(pool):
        if abs(piece.length + kerf - capacity) <= FIT_TOLERANCE_MM:
            return i
    return None


def _find_best_fit(pool: list, capacity: float, kerf: float) -> Optional[int]:
    """Index of the longest piece that fits. Relies on `pool` being sorted longest first."""
    for i, piece in enumerate(pool):
        if piece.length + kerf <= capacity + FIT_TOLERANCE_MM:
            return i
    return None


def _is_positive_length(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value) and value > 0


def _whole_quantity(value) -> Optional[int]:
    """Return the quantity as int if it is a whole number >= 1, else None."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    if not math.isfinite(value) or value < 1 or value != int(value):
        return None
    return int(value)
