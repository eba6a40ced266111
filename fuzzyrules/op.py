"""
Numeric helpers shared by the rule engine.

Membership degrees are compared with a small tolerance so that values which
differ only by floating point noise (e.g. 0.1 + 0.2 vs 0.3) are treated as
equal by the activation strategies and the terms.
"""

import math

MACHEPS = 1e-6


def is_eq(a: float, b: float, macheps: float = MACHEPS) -> bool:
    """True if a and b are equal within macheps. Two NaNs compare equal."""
    if a == b:
        return True
    if math.isnan(a) and math.isnan(b):
        return True
    return abs(a - b) < macheps


def is_gt(a: float, b: float, macheps: float = MACHEPS) -> bool:
    return not is_eq(a, b, macheps) and a > b


def is_ge(a: float, b: float, macheps: float = MACHEPS) -> bool:
    return is_eq(a, b, macheps) or a > b


def is_lt(a: float, b: float, macheps: float = MACHEPS) -> bool:
    return not is_eq(a, b, macheps) and a < b


def is_le(a: float, b: float, macheps: float = MACHEPS) -> bool:
    return is_eq(a, b, macheps) or a < b


def bound(x: float, minimum: float, maximum: float) -> float:
    """Clamps x to [minimum, maximum]. NaN is returned unchanged."""
    if math.isnan(x):
        return x
    return max(minimum, min(maximum, x))


def scale(x: float, from_min: float, from_max: float, to_min: float, to_max: float) -> float:
    """Linearly maps x from one range onto another."""
    return (to_max - to_min) / (from_max - from_min) * (x - from_min) + to_min


def fmt(x: float, decimals: int = 3) -> str:
    """
    Formats a float compactly for parameter strings and log lines.

    Examples:
        fmt(1.0) -> "1", fmt(0.25) -> "0.25", fmt(nan) -> "nan"
    """
    if math.isnan(x):
        return "nan"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    text = f"{x:.{decimals}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def fmt_exact(x: float) -> str:
    """
    Formats a float so that to_float() reads back the same value.

    Examples:
        fmt_exact(1.0) -> "1", fmt_exact(0.1234) -> "0.1234"
    """
    text = repr(float(x))
    if text.endswith(".0"):
        text = text[:-2]
    return "0" if text == "-0" else text


def to_float(text: str) -> float:
    """Parses a float, accepting the nan/inf spellings produced by fmt()."""
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"[conversion error] <{text}> is not a number") from None
