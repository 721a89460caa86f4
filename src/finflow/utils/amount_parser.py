"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

_CURRENCY_RE = re.compile(r"[$€£¥₺]|\b(?:TRY|USD|EUR|GBP)\b", re.IGNORECASE)


def parse_amount(amount_str: str, allow_negative: bool = False) -> Decimal:
    """Parse an amount string into a Decimal rounded to cents.

    Handles "1200", "1,200.50", "$45", "₺45" and "45 TRY". A single comma
    followed by exactly two digits is read as a decimal separator
    ("12,50" is 12.50); other commas are thousands separators.

    Args:
        amount_str: Amount string
        allow_negative: If False, negative amounts are rejected

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = _CURRENCY_RE.sub("", amount_str).strip().replace(" ", "")
    if re.fullmatch(r"-?\d+,\d{2}", text):
        text = text.replace(",", ".")
    else:
        text = text.replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if amount < 0 and not allow_negative:
        raise ValueError(f"Amount cannot be negative: '{amount_str}'")

    return amount.quantize(Decimal("0.01"), ROUND_HALF_UP)
