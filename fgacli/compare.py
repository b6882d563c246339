"""Small comparison helpers for lists of strings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


def check_string_arrays_equal(
    array1: Sequence[str] | None, array2: Sequence[str] | None
) -> bool:
    """Return whether both sequences hold the same strings, ignoring order.

    ``None`` is treated as an empty sequence.
    """
    first = list(array1 or [])
    second = list(array2 or [])
    if len(first) != len(second):
        return False
    return sorted(first) == sorted(second)


def contains(items: Iterable[str], looking_for: str) -> bool:
    """Return whether ``looking_for`` is one of ``items``."""
    return any(item == looking_for for item in items)