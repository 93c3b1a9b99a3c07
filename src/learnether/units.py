"""
Unit conversion between smallest-unit integers and decimal strings.

Conversions are exact decimal shifts on digit strings; floats never
take part, so ``parse_units(format_units(n, d), d) == n`` always holds.
"""

from __future__ import annotations

import re
from typing import Union

Unit = Union[int, str]

UNIT_DECIMALS: dict[str, int] = {
    "wei": 0,
    "kwei": 3,
    "mwei": 6,
    "gwei": 9,
    "szabo": 12,
    "finney": 15,
    "ether": 18,
}

_DECIMAL_RE = re.compile(r"^(-)?(\d*)(?:\.(\d*))?$")


def unit_decimals(unit: Unit) -> int:
    """Resolve a decimals count or a unit name (``"gwei"``) to a decimals count."""
    if isinstance(unit, str):
        try:
            return UNIT_DECIMALS[unit.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown unit: {unit!r}") from None
    decimals = int(unit)
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")
    return decimals


def format_units(value: int, unit: Unit = 18) -> str:
    """
    Render a smallest-unit integer as a decimal string.

    Trailing fractional zeros are dropped but one fractional digit is
    always kept (``"1.0"``).  With zero decimals the plain integer is
    returned.
    """
    decimals = unit_decimals(unit)
    amount = int(value)
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))

    if decimals == 0:
        return sign + digits

    digits = digits.rjust(decimals + 1, "0")
    whole, fraction = digits[:-decimals], digits[-decimals:].rstrip("0")
    return f"{sign}{whole}.{fraction or '0'}"


def parse_units(value: Union[str, int], unit: Unit = 18) -> int:
    """
    Parse a decimal string into a smallest-unit integer.

    Raises:
        ValueError: If the value is malformed or has more fractional
            digits than the unit allows.
    """
    decimals = unit_decimals(unit)
    text = str(value).strip().replace("_", "")
    match = _DECIMAL_RE.match(text)
    if match is None or not (match.group(2) or match.group(3)):
        raise ValueError(f"Invalid decimal value: {value!r}")

    negative, whole, fraction = match.group(1), match.group(2) or "0", match.group(3) or ""
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise ValueError(
            f"Too many decimals in {value!r}: at most {decimals} allowed"
        )

    amount = int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    return -amount if negative else amount


def format_ether(value: int) -> str:
    return format_units(value, 18)


def parse_ether(value: Union[str, int]) -> int:
    return parse_units(value, 18)
