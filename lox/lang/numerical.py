"""Numbers in lox. There is a single numeric type, a double-precision float: number literals are always read as floats
and every arithmetic result is one. Division never raises; it follows IEEE-754 like the rest of the arithmetic.

Source: https://craftinginterpreters.com/evaluating-expressions.html#runtime-errors
"""

import math
from decimal import Decimal


def number(lexeme):
    """Returns the float value of a scanned number literal: DIGITS ( "." DIGITS )?"""
    return float(lexeme)


def divide(left, right):
    """IEEE-754 division: x / 0 is a signed infinity and 0 / 0 (or nan / 0) is nan."""
    if right != 0.0:
        return left / right

    if left == 0.0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


def are_equal(left, right):
    """Float equality as the boxed comparison sees it: nan equals nan."""
    return left == right or (math.isnan(left) and math.isnan(right))


def format_number(num):
    """Returns the canonical text of num: the shortest round-trip digits written out in plain decimal, with integral
    values losing their trailing '.0' ('3', '-0', '1000000000000000000000', '0.0000001').
    """
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"

    text = repr(num)
    if "e" in text:
        text = format(Decimal(text), "f")  # repr switches to exponent form outside 1e-4 <= |num| < 1e16
    if text.endswith(".0"):
        text = text[:-2]
    return text
