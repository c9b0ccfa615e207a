"""Half-up rounding of displayed nutrition values.

Rounding works on the exact binary value of the float, so ``1.45`` (stored
as ``1.4499999...``) rounds to ``1.4`` while ``0.25`` rounds to ``0.3``.
Integers round halves toward positive infinity, tenths round halves away
from zero.
"""

import math
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

_HALF = Decimal("0.5")
_TENTH = Decimal("0.1")


def round_int(value: float) -> int:
    """Round to the nearest integer, halves up (``floor(value + 0.5)``)."""
    if math.isnan(value) or math.isinf(value):
        msg = f"cannot round {value} to an integer"
        raise ValueError(msg)
    return int((Decimal(value) + _HALF).to_integral_value(rounding=ROUND_FLOOR))


def round_tenth(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    if math.isnan(value) or math.isinf(value):
        return value
    return float(Decimal(value).quantize(_TENTH, rounding=ROUND_HALF_UP))
