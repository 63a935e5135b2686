"""Mini README: Address validation and normalisation.

External addresses are normalised to lowercase ``0x``-prefixed hex once,
when they enter the data model, so identity checks elsewhere are plain
string equality.
"""

from __future__ import annotations

from typing import Optional

from eth_utils import is_address, to_normalized_address

from ..errors import InvalidInput


def normalize_address(value: Optional[str], *, field: str = "address") -> str:
    """Validate ``value`` and return its canonical lowercase form."""

    if not value or not isinstance(value, str):
        raise InvalidInput(f"{field} required")
    candidate = value.strip()
    if not is_address(candidate):
        raise InvalidInput(f"Invalid {field} address")
    return to_normalized_address(candidate)


def same_address(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive comparison that treats missing values as unequal."""

    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()
