"""
All replay arithmetic uses integer cents. Never store floats in state.

This module provides money primitives for converting between dollar
amounts and integer cents, plus a tolerant parser for the amount
notations that show up in hand-history text ("$1,250.50", "€20", "300").
"""

import re


# Type alias for cents - all internal arithmetic uses this
Cents = int

CURRENCY_SYMBOLS = "$€£"

# Digits with optional thousands separators and decimals, or a bare ".50"
AMOUNT_PATTERN = r"\d[\d,]*(?:\.\d+)?|\.\d+"

_AMOUNT_RE = re.compile(rf"[$€£]?\s?({AMOUNT_PATTERN})")


def to_cents(amount: float | str | int) -> Cents:
    """
    Convert dollar amount to cents.
    
    Args:
        amount: Dollar amount as float, string, or int. Strings may carry
            a currency symbol and thousands separators.
        
    Returns:
        Integer cents
        
    Raises:
        ValueError: If more than 2 decimal places or invalid format
    """
    if isinstance(amount, bool):
        raise ValueError(f"Unsupported type: {type(amount)}")
    if isinstance(amount, str):
        cleaned = amount.strip().lstrip(CURRENCY_SYMBOLS).replace(",", "")
        if '.' in cleaned:
            parts = cleaned.split('.')
            if len(parts) != 2:
                raise ValueError(f"Invalid decimal format: {amount}")
            if len(parts[1]) > 2:
                raise ValueError(f"Too many decimal places: {amount}")
        try:
            float_val = float(cleaned)
        except ValueError as e:
            raise ValueError(f"Invalid amount format: {amount}") from e
    elif isinstance(amount, (int, float)):
        float_val = float(amount)
    else:
        raise ValueError(f"Unsupported type: {type(amount)}")

    return round(float_val * 100)


def from_cents(cents: Cents) -> float:
    """
    Convert cents back to dollars (for display only).
    
    Args:
        cents: Integer cents
        
    Returns:
        Float dollar amount
    """
    if not isinstance(cents, int):
        raise ValueError(f"Cents must be integer, got {type(cents)}")
    
    return cents / 100.0


def fmt_money(cents: Cents) -> str:
    """
    Format cents as currency string.
    
    Args:
        cents: Integer cents
        
    Returns:
        Formatted string like "$12.34" or "-$3.00"
    """
    if not isinstance(cents, int):
        raise ValueError(f"Cents must be integer, got {type(cents)}")

    sign = "-" if cents < 0 else ""
    return f"{sign}${from_cents(abs(cents)):.2f}"


def parse_amount(text: str) -> Cents | None:
    """
    Find the first amount in a piece of hand-history text.

    Unlike to_cents this never raises: text without a usable amount
    yields None. Sub-cent precision is rounded.
    """
    match = _AMOUNT_RE.search(text)
    if not match:
        return None
    return round(float(match.group(1).replace(",", "")) * 100)


def parse_amounts(text: str) -> list[Cents]:
    """All amounts on a line, in order of appearance."""
    return [round(float(m.replace(",", "")) * 100) for m in _AMOUNT_RE.findall(text)]
