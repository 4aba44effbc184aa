from __future__ import annotations

"""Rupee formatting for calculator output."""


def format_inr(amount: object, decimals: int = 0) -> str:
    """Format a number with Indian digit grouping, e.g. 12,34,567."""
    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return "₹0"
    if value != value or value in (float("inf"), float("-inf")):
        return "₹0"
    negative = value < 0
    text = f"{abs(value):.{max(decimals, 0)}f}"
    whole, _, fraction = text.partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    formatted = f"{whole}.{fraction}" if fraction else whole
    return f"{'-' if negative else ''}₹{formatted}"
