from __future__ import annotations

import math

INR_TO_USD = 83.0


def _indian_grouping(amount: int) -> str:
    """Group digits the en-IN way: last three, then pairs (12,34,567)."""
    digits = str(abs(amount))
    if len(digits) <= 3:
        grouped = digits
    else:
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        grouped = ",".join([*pairs, tail])
    return f"-{grouped}" if amount < 0 else grouped


def format_inr(value: float | None) -> str:
    if value is None or not math.isfinite(value) or value == 0:
        return "₹0"
    return f"₹{_indian_grouping(int(math.floor(value + 0.5)))}"


def format_currency(value: float | None, show_both: bool = False) -> str:
    inr = format_inr(value)
    if not show_both or inr == "₹0":
        return inr
    return f"{inr} (${float(value) / INR_TO_USD:,.2f})"
