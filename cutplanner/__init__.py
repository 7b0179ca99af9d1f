"""
Cutting plan service for metal fabrication quotes.

Turns required piece lengths into an assignment of pieces to stock bars
and reports waste per bar and in total.
"""
