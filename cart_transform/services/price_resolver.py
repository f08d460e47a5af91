from decimal import Decimal

from cart_transform.errors import PriceParseFailure
from cart_transform.utils.common import ZERO, money, parse_decimal
from cart_transform.utils.tracing import Tracer, null_tracer


def _amount(value: str, field: str, trace: Tracer) -> Decimal:
    try:
        return parse_decimal(value)
    except PriceParseFailure as e:
        trace("price.unparsable", {"field": field, "value": value, "code": e.code})
        return ZERO


def resolve_price(base_price: str, addon_price: str, trace: Tracer = null_tracer) -> str:
    """
    Combine policy: the override replaces the displayed price, so it has
    to carry base + add-on. Per line as sent; quantity is not applied.

    Decimal arithmetic, ROUND_HALF_UP to two places. Unparseable inputs
    count as zero.
    """
    base = _amount(base_price, "base", trace)
    addon = _amount(addon_price, "addon", trace)
    return money(base + addon)
