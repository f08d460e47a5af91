import json, re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

from cart_transform.errors import PriceParseFailure, PropertiesParseFailure

CENT = Decimal("0.01")
ZERO = Decimal("0")

# plain or exponent decimal, the forms a storefront puts in a price string
PRICE_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
CURRENCY_PREFIX_RE = re.compile(r"^[$€£¥]\s*")
MAX_PRICE_DIGITS = 15


def money(n: Decimal) -> str:
    # half-up to 2dp, never "-0.00"
    q = n.quantize(CENT, rounding=ROUND_HALF_UP)
    if q == 0:
        q = ZERO.quantize(CENT)
    return format(q, "f")


def parse_decimal(value: Any) -> Decimal:
    """
    Strict decimal parse for a wire price.

    Accepts a str, int or Decimal; raises PriceParseFailure for anything
    else, for non-finite values and for magnitudes no cart can carry.
    """
    if isinstance(value, bool):
        raise PriceParseFailure(f"not a price: {value!r}")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, str):
        v = value.strip()
        if not PRICE_RE.match(v):
            raise PriceParseFailure(f"not a price: {value!r}")
        try:
            d = Decimal(v)
        except InvalidOperation as e:
            raise PriceParseFailure(f"not a price: {value!r}") from e
    else:
        raise PriceParseFailure(f"not a price: {value!r}")
    if not d.is_finite() or d.adjusted() > MAX_PRICE_DIGITS:
        raise PriceParseFailure(f"not a price: {value!r}")
    return d


def strip_price(value: str) -> str:
    """'  $1.54 ' -> '1.54'. Anything else is left for the resolver to judge."""
    return CURRENCY_PREFIX_RE.sub("", value.strip())


def number_price(value: Any) -> Optional[str]:
    """JSON number -> two-decimal string; None for bools and non-numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        return None
    try:
        return money(parse_decimal(value))
    except PriceParseFailure:
        return None


def _maybe_json(value):
    if isinstance(value, str):
        v = value.strip()
        if not v:
            return None
        try:
            return json.loads(v, parse_float=Decimal)
        except (ValueError, RecursionError):
            return value
    return value


def loads_object(text: str) -> Dict[str, Any]:
    """
    Second-level parse of a properties bag.

    Floats come back as Decimal so a numeric add-on price never passes
    through binary floating point.
    """
    obj = _maybe_json(text)
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise PropertiesParseFailure(
            "properties is not a JSON object",
            context={"properties": text[:200]},
        )
    return obj
