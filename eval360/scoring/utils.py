"""
Decimal Utilities
eval360/scoring/utils.py

Precision-safe rounding and answer coercion for scoring calculations.
Rounding is half-up (2.345 → 2.35) so persisted scores match what the
report layer has always displayed.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def to_decimal(value: float, places: int = 4) -> Decimal:
    """Convert float to Decimal with explicit precision."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def round_half_up(value: float, places: int = 2) -> float:
    """Round a float half-up and return it as a float."""
    return float(to_decimal(value, places))


def to_number(value: Any) -> Optional[float]:
    """
    Coerce an answer to a number.

    Booleans become 1/0 and numeric strings are parsed; anything else
    (including NaN and empty strings) returns None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_text(value: Any) -> str:
    """String form used for loose answer comparison: ``5.0`` → ``"5"``, ``True`` → ``"true"``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_answered(value: Any) -> bool:
    """An answer counts once it holds something: None and blank strings do not."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
