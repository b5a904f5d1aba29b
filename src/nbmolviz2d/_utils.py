"""Utility functions for nbmolviz2d."""

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


def with_default(value: T | None, default: T) -> T:
    """Return value unless it is None.

    Examples:
        >>> with_default(None, 20)
        20
        >>> with_default(0, 20)
        0
    """
    return default if value is None else value


def to_pixels(value: Any) -> float:
    """Convert a CSS-ish size ("400px", "400", 400) to a float.

    Examples:
        >>> to_pixels("400px")
        400.0
        >>> to_pixels(250)
        250.0
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("px"):
            text = text[:-2]
        return float(text)
    return float(value)


def css_size(value: Any) -> str:
    """Format a size for a style map: numbers get a ``px`` suffix."""
    if isinstance(value, str):
        return value
    return f"{value}px"


def bond_key(bond: Any) -> tuple:
    """Normalize a bond reference from the wire into a visual-index key.

    JSON has no tuples, so ``[0, 1]`` arrives as a list.
    """
    if isinstance(bond, (list, tuple)):
        return tuple(bond)
    return bond


def atom_key(atom: Any) -> Any:
    """Normalize an atom reference: scene attributes may hand back ``"3"`` for ``3``."""
    if isinstance(atom, str) and atom.isdigit():
        return int(atom)
    return atom
