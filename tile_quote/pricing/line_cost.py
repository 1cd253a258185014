"""Per-line cost. No rounding here: money is only rounded for display."""

from __future__ import annotations

from typing import Any

from tile_quote.utils.numbers import coerce_number, finite_or_zero


def line_cost(quantity: Any, unit_price: Any) -> float:
    """cartons × price for tiles, quantity × price for materials."""
    return finite_or_zero(
        coerce_number(quantity, "quantity") * coerce_number(unit_price, "unit_price"),
        "line_cost",
    )


def tile_line_cost(line: Any) -> float:
    return line_cost(getattr(line, "cartons", 0), getattr(line, "unit_price", 0))


def material_line_cost(line: Any) -> float:
    return line_cost(getattr(line, "quantity", 0), getattr(line, "unit_price", 0))
