"""Number rendering shared by the translator and the DEST exporter."""

from __future__ import annotations

import math
from decimal import Decimal


def format_number(value: float) -> str:
    """Render a number the way a JavaScript number prints.

    Integral values drop the decimal point, other values use the shortest
    round-trip decimal, and exponent form is used only outside [1e-6, 1e21).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # Past 2**53 the exact binary value has more digits than the shortest repr.
    if value.is_integer() and abs(value) < 2**53:
        return str(int(value))

    text = repr(value)
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(text).normalize(), "f")
    mantissa, exponent = text.split("e")
    power = int(exponent)
    sign = "+" if power > 0 else "-"
    return f"{mantissa}e{sign}{abs(power)}"
