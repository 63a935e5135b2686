"""Mini README: Exact integer amounts for the grant ledger.

Structure:
    * WEI_PER_ETHER - smallest units per whole native coin.
    * parse_amount - validate a non-negative integer amount of wei.
    * parse_ether - convert an ether-denominated decimal string to wei.
    * split_fee - compute the (net, fee) pair for a gross payout.
    * format_ether - display helper used by HTTP responses and logs.

All ledger arithmetic uses plain ``int`` values of wei; decimals only appear
at the boundary where callers type ether amounts.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Tuple, Union

from ..errors import InvalidAmount

WEI_PER_ETHER = 10**18
ETHER_DECIMALS = 18
MAX_WEI = 2**256 - 1

_DIGITS = re.compile(r"^[0-9]+$")

AmountLike = Union[int, str]


def parse_amount(value: AmountLike, *, field: str = "amount") -> int:
    """Return ``value`` as a non-negative integer amount of wei."""

    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid {field}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidAmount(f"Invalid {field}: amounts cannot be negative")
        return value
    if isinstance(value, str) and _DIGITS.match(value.strip()):
        return int(value.strip())
    raise InvalidAmount(f"Invalid {field}")


def parse_ether(value: Union[str, int, Decimal], *, field: str = "amount") -> int:
    """Convert a decimal ether amount such as ``"0.5"`` into wei.

    The conversion works on the decimal's digits and exponent with integer
    arithmetic, so no context precision applies and no value is rounded.
    """

    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"Invalid {field}")
    try:
        ether = Decimal(str(value).strip())
    except InvalidOperation as error:
        raise InvalidAmount(f"Invalid {field}") from error
    if not ether.is_finite() or ether < 0:
        raise InvalidAmount(f"Invalid {field}")

    _, digits, exponent = ether.as_tuple()
    coefficient = int("".join(map(str, digits)))
    if coefficient == 0:
        return 0
    shift = exponent + ETHER_DECIMALS
    if shift >= 0:
        if len(digits) + shift > len(str(MAX_WEI)):
            raise InvalidAmount(f"Invalid {field}: amount too large")
        wei = coefficient * 10**shift
    else:
        # more fractional digits than the coefficient holds is never whole
        if -shift > len(digits) or coefficient % 10**-shift:
            raise InvalidAmount(f"Invalid {field}: more than {ETHER_DECIMALS} decimals")
        wei = coefficient // 10**-shift
    if wei > MAX_WEI:
        raise InvalidAmount(f"Invalid {field}: amount too large")
    return wei


def split_fee(gross: int, fee_percent: int) -> Tuple[int, int]:
    """Return ``(net, fee)`` where ``net`` rounds down in the platform's favour."""

    if not 0 <= fee_percent <= 100:
        raise ValueError(f"fee_percent must be between 0 and 100, got {fee_percent}")
    net = gross * (100 - fee_percent) // 100
    return net, gross - net


def format_ether(wei: int) -> str:
    """Render wei as ether with six decimals, e.g. ``'0.500000 ETH'``."""

    return f"{Decimal(int(wei)) / WEI_PER_ETHER:.6f} ETH"
