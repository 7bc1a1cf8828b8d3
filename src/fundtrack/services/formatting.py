"""Display formatting for raw signed numbers.

Calculators emit floats; these helpers are the only place numbers become
strings.
"""

from __future__ import annotations

from typing import Literal

Tone = Literal["up", "down", "flat"]


def format_currency(value: float, min_fraction_digits: int = 2) -> str:
    """Group thousands and show between ``min_fraction_digits`` and max(2, min) decimals."""

    max_fraction_digits = max(2, min_fraction_digits)
    text = f"{value:,.{max_fraction_digits}f}"
    if max_fraction_digits > min_fraction_digits and "." in text:
        whole, fraction = text.split(".")
        fraction = fraction.rstrip("0").ljust(min_fraction_digits, "0")
        text = f"{whole}.{fraction}" if fraction else whole
    if text.startswith("-") and text.strip("-0.,") == "":
        text = text[1:]
    return text


def format_pct(value: float) -> str:
    sign = "+" if value > 0 else ""
    text = f"{sign}{value:.2f}%"
    return "0.00%" if text == "-0.00%" else text


def format_signed_currency(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{format_currency(value)}"


def sign_tone(value: float) -> Tone:
    """Classify a signed value for colouring: gains ``up``, losses ``down``."""

    if value > 0:
        return "up"
    if value < 0:
        return "down"
    return "flat"
