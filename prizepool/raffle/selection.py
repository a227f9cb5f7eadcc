"""Helpers for mapping oracle randomness onto entrant slots."""

from __future__ import annotations


def derive_winner_index(random_value: int, entrant_count: int) -> int:
    """Return the slot index selected by ``random_value``.

    Parameters
    ----------
    random_value : int
        Non-negative random word delivered by the oracle.
    entrant_count : int
        Number of slots in the round; must be positive.

    Returns
    -------
    int
        ``random_value mod entrant_count``.
    """

    if isinstance(random_value, bool) or not isinstance(random_value, int):
        raise TypeError("random_value must be an integer")
    if random_value < 0:
        raise ValueError("random_value must be non-negative")
    if entrant_count <= 0:
        raise ValueError("cannot select a winner from an empty round")
    return random_value % entrant_count


__all__ = ["derive_winner_index"]
