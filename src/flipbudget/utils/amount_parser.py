"""Amount parsing utilities."""

import re
from decimal import Decimal

_NUMBER_PATTERN = re.compile(r"^([+-]?)(\d+(?:\.\d*)?|\.\d+)([km]?)$", re.IGNORECASE)

_SUFFIX_MULTIPLIERS = {"": Decimal("1"), "k": Decimal("1000"), "m": Decimal("1000000")}


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45", "-123.45", "$1,234.56"
    - "(123.45)" (negative in parentheses)
    - "8%" (percent sign is dropped)
    - "250k", "1.2M" (thousands and millions, common for ARV and prices)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    text = re.sub(r"[$€£¥%,\s]", "", text)

    match = _NUMBER_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")

    sign, digits, suffix = match.groups()
    amount = Decimal(digits) * _SUFFIX_MULTIPLIERS[suffix.lower()]
    if sign == "-":
        negative = not negative
    return -amount if negative else amount
