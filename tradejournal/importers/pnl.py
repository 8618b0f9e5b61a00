"""Parsing of P&L amounts as printed by broker reports."""

import re
from typing import Optional

_NON_NUMERIC = re.compile(r"[^0-9.,\-]")


def parse_pnl_string(text: Optional[str]) -> float:
    """Parse a money amount into a float.

    Handles accounting negatives (``(12.50)``), currency symbols, and both
    ``1,234.56`` and ``1.234,56`` styles: whichever of the last comma and
    the last period comes later is taken as the decimal point.

    Args:
        text: The raw cell text.

    Returns:
        The amount, or 0.0 when nothing numeric can be read.
    """
    if not text:
        return 0.0

    clean = text.strip()
    if clean.startswith("(") and clean.endswith(")"):
        clean = "-" + clean[1:-1]
    clean = _NON_NUMERIC.sub("", clean)

    decimal_at = max(clean.rfind(","), clean.rfind("."))
    if decimal_at >= 0:
        integer_part = clean[:decimal_at].replace(",", "").replace(".", "")
        clean = integer_part + "." + clean[decimal_at + 1:]

    try:
        return float(clean)
    except ValueError:
        return 0.0
