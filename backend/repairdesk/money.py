# Overview: Decimal helpers for monetary columns (Numeric(12, 2)).

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value: Decimal | None) -> str | None:
    """Two-decimal string for JSON ("108.00"); None passes through."""
    if value is None:
        return None
    return str(quantize_money(Decimal(value)))
