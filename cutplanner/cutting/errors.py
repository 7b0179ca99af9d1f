"""Errors raised and warnings emitted by the cutting plan engine."""


class ValidationError(ValueError):
    """Malformed input. Raised before any packing starts; no partial result."""


class UnplaceablePieceWarning(UserWarning):
    """Some pieces are longer than every stock option and were left out of the plan."""
