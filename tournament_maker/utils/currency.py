import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from tournament_maker.core.config import settings

_STRIP = re.compile(r"[$,\s]")


def format_currency(amount, symbol: Optional[str] = None) -> str:
    """Format an amount as e.g. "$1,234.50"; negative amounts get a leading minus."""
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    value = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def _clean(text: str) -> str:
    return _STRIP.sub("", text)


def parse_currency(text) -> Decimal:
    """Parse "$25.00", "25" or "1,000.5"; anything unparseable becomes 0."""
    if not text or not isinstance(text, str):
        return Decimal("0")
    try:
        value = Decimal(_clean(text))
    except InvalidOperation:
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def is_valid_currency(text) -> bool:
    if not text or not isinstance(text, str):
        return False
    try:
        value = Decimal(_clean(text))
    except InvalidOperation:
        return False
    return value.is_finite() and value >= 0
