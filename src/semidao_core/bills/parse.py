"""Field normalisation for the bills listing.

Every parser here is total: malformed cells degrade to None (dates, URLs)
or NaN (amounts) instead of raising, so one bad row never aborts a listing.

Examples:
    >>> parse_date("15/03/2023")
    datetime.date(2023, 3, 15)
    >>> normalize_price("12,50 €")
    12.5
    >>> build_filename(date(2023, 2, 1), "semidao", 45.67, "REF123")
    '2023-02-01_semidao_45.67EUR_REF123.pdf'

"""

from __future__ import annotations

import logging
import math
import re
from datetime import date

import numpy as np

logger = logging.getLogger(__name__)

DIGITS_RE = re.compile(r"\d+")

# Leading numeric prefix, read the way a lenient float parser does
NUMBER_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

CURRENCY_SYMBOL = "€"


def parse_date(text: str | None) -> date | None:
    """Parse a dd/mm/yyyy cell into a date.

    Any separator works: the digit runs are read as (day, month, year).

    Args:
        text: Raw cell text.

    Returns:
        The calendar date, or None when there are not exactly three digit
        runs or they do not form a valid date.

    Examples:
        >>> parse_date("01/02/2023")
        datetime.date(2023, 2, 1)
        >>> parse_date("not-a-date") is None
        True

    """
    logger.debug("read date %r", text)
    parts = DIGITS_RE.findall(text or "")
    if len(parts) != 3:
        return None
    day, month, year = (int(p) for p in parts)
    try:
        return date(year, month, day)
    except (ValueError, OverflowError):
        return None


def _normalize_separators(value: str) -> str:
    """Turn "1.234,56", "1,234.56" and "12,50" into point-decimal form."""
    if "," in value and "." in value:
        if value.rfind(",") > value.rfind("."):
            return value.replace(".", "").replace(",", ".")
        return value.replace(",", "")
    if "," in value:
        return value.replace(",", ".")
    return value


def normalize_price(price: str | None) -> float:
    """Convert a price string such as "45.67 €" to a float.

    Args:
        price: Raw cell text.

    Returns:
        The numeric value, or NaN when no number can be read. Check the
        result with math.isnan, never with equality.

    """
    logger.debug("in normalize_price %r", price)
    if price is None:
        return np.nan
    value = price.replace(CURRENCY_SYMBOL, "")
    value = re.sub(r"\s+", "", value)
    value = _normalize_separators(value)
    m = NUMBER_PREFIX_RE.match(value)
    if not m:
        return np.nan
    amount = float(m.group(0))
    if not math.isfinite(amount):
        return np.nan
    return amount


def resolve_file_url(href: str | None, base_url: str) -> str | None:
    """Append a site-relative href to the base URL, verbatim.

    Returns:
        None when there is no href, otherwise base_url + href.

    """
    logger.debug("fileurl href %r", href)
    if href is None:
        return None
    return f"{base_url}{href}"


def format_date(d: date | None) -> str:
    """Format a bill date as YYYY-MM-DD ("unknown-date" when missing)."""
    if d is None:
        return "unknown-date"
    return d.isoformat()


def format_amount(amount: float) -> str:
    """Format an amount the way it reads on the bill.

    Integral values drop the trailing ".0"; NaN renders as "NaN".

    Examples:
        >>> format_amount(45.0)
        '45'
        >>> format_amount(45.67)
        '45.67'

    """
    if math.isnan(amount):
        return "NaN"
    if amount.is_integer():
        return str(int(amount))
    return repr(amount)


def build_filename(
    bill_date: date | None,
    vendor: str,
    amount: float,
    vendor_ref: str | None = None,
) -> str:
    """Build the deterministic PDF filename for a bill.

    Format: {YYYY-MM-DD}_{vendor}_{amount}EUR[_{vendor_ref}].pdf

    The reference segment, separator included, is left out when the
    reference is empty or None.

    """
    ref = f"_{vendor_ref}" if vendor_ref else ""
    return f"{format_date(bill_date)}_{vendor}_{format_amount(amount)}EUR{ref}.pdf"
