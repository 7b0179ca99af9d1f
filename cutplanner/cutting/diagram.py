"""
Diagram data for cutting plans.

Lays out each bar left to right in cutting order: piece, kerf, piece,
kerf, ... then the trailing offcut. Renderers (table, SVG, PDF) scale the
segments against the bar's stock length; nothing here draws anything.
"""

from .models import CuttingPlanResult

SEGMENT_PIECE = "piece"
SEGMENT_KERF = "kerf"
SEGMENT_WASTE = "waste"


def _segment(kind: str, start: float, length: float, stock_length: float, **extra) -> dict:
    segment = {
        "type": kind,
        "start": round(start, 3),
        "length": round(length, 3),
        "percentage": round(length / stock_length * 100.0, 2),
    }
    segment.update(extra)
    return segment


def build_bar_diagram(bar) -> dict:
    segments = []
    position = 0.0
    for piece in bar.placed_pieces:
        segments.append(_segment(SEGMENT_PIECE, position, piece.length, bar.stock_length,
                                 tag=piece.tag))
        position += piece.length
        if bar.kerf > 0:
            segments.append(_segment(SEGMENT_KERF, position, bar.kerf, bar.stock_length))
            position += bar.kerf

    if bar.waste_length > 0:
        segments.append(_segment(SEGMENT_WASTE, position, bar.waste_length, bar.stock_length))

    return {
        "bar_number": bar.number,
        "stock_length": bar.stock_length,
        "segments": segments,
    }


def build_diagram(result: CuttingPlanResult) -> list:
    """One diagram dict per bar, in bar order."""
    return [build_bar_diagram(bar) for bar in result.bars]
