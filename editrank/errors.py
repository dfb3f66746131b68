from __future__ import annotations

"""
Error taxonomy for the matching engine.

* InputTooLarge      - an operand is longer than the kernel accepts.
* ComputationFailed  - anything else that broke inside a scheduled unit of work.
"""


class EditRankError(Exception):
    """Base class for engine errors."""


class InputTooLarge(EditRankError, ValueError):
    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(
            f"Maximum string length is {limit}. Yours is {length}."
        )


class ComputationFailed(EditRankError):
    """Raised (and reported) when a ranking unit dies for an unexpected reason."""
