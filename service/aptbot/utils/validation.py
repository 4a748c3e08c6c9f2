"""
Input validation for command arguments.
"""

import re

# Postgres `integer` upper bound (apartment_info.apartment_number)
MAX_APARTMENT_NUMBER = 2_147_483_647

_DIGITS = re.compile(r"[0-9]+")


def is_positive_integer(value: str) -> bool:
    """
    Check that value is the canonical decimal form of a non-negative integer.

    The string must round-trip through int() unchanged, so signs, decimals,
    exponents, whitespace and leading zeros are all rejected:
    "5" and "0" pass; "05", "+5", "-5", "5.0", "5e1", " 5" do not.
    """
    if not isinstance(value, str) or not _DIGITS.fullmatch(value):
        return False

    number = int(value)
    return str(number) == value and 0 <= number <= MAX_APARTMENT_NUMBER
