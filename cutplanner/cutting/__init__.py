"""
Cutting plan engine.

Pure Python, no I/O. Given required piece lengths and available stock
lengths, assigns pieces to stock bars (first-fit decreasing with a per-cut
kerf allowance) and reports per-bar contents and waste totals.
"""
