import json
import logging
from typing import Optional, Sequence

from cart_transform.errors import SerializationFailure
from cart_transform.schemas.models import Cart, PriceOverride, ResponseEnvelope

log = logging.getLogger(__name__)

SERIALIZATION_ERROR = '{"error":"JSON serialization failed"}'


def assemble(cart: Cart, prices: Sequence[Optional[str]]) -> ResponseEnvelope:
    """
    prices[i] belongs to cart.line_items[i]. One override per priced item,
    in cart order; items without a resolved price are left out entirely.
    """
    updates = []
    for item, adjusted in zip(cart.line_items, prices):
        if adjusted is None:
            continue
        updates.append(PriceOverride(line_item_id=item.id, adjusted_price=adjusted))
    return ResponseEnvelope(updates=updates)


def encode(payload) -> str:
    # compact + ascii so the same input always yields the same bytes
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=True, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"JSON serialization failed: {e}") from e


def serialize(envelope: ResponseEnvelope) -> str:
    try:
        return encode(envelope.to_wire())
    except SerializationFailure as e:
        log.error("serialize: %s", e.message)
        return SERIALIZATION_ERROR
