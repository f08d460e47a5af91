"""
Schema normalizer: raw document -> canonical Cart.

Carts reach us in several historical shapes. Product fields may be nested
under "product" or flattened onto the line item, quantity may be a number
or a string, metafields may be missing. All of that is settled here so the
later stages only ever see a LineItem.
"""
import json
from decimal import Decimal
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from cart_transform.errors import MalformedInput
from cart_transform.schemas.models import Cart, LineItem
from cart_transform.utils.tracing import Tracer, null_tracer

PRODUCT_FIELDS = ("product_id", "variant_id", "product_title", "price", "metafields")

RawDocument = Union[bytes, bytearray, str, Dict[str, Any]]


def _load_document(raw: RawDocument) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInput(f"JSON parse failed: input is not UTF-8 ({e.reason})") from e
    if not isinstance(raw, str):
        raise MalformedInput(f"JSON parse failed: unsupported input type {type(raw).__name__}")
    try:
        doc = json.loads(raw, parse_float=Decimal)
    except (ValueError, RecursionError) as e:
        raise MalformedInput(f"JSON parse failed: {e}") from e
    if not isinstance(doc, dict):
        raise MalformedInput("JSON parse failed: top-level value is not an object")
    return doc


def _flatten_line_item(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Lift product.* onto the line item; flattened values win."""
    out = dict(raw)
    product = out.pop("product", None)
    if isinstance(product, dict):
        for field in PRODUCT_FIELDS:
            if out.get(field) is None and product.get(field) is not None:
                out[field] = product[field]
    return out


def _currency_rate(doc: Dict[str, Any]):
    settings = doc.get("currency_settings")
    if isinstance(settings, dict) and settings.get("actual_rate") is not None:
        return str(settings["actual_rate"])
    return None


def parse_cart(raw: RawDocument, trace: Tracer = null_tracer) -> Cart:
    """
    Parse one cart document.

    Raises MalformedInput when the document is not JSON, has no
    cart.line_items list, or holds a line item without an id. Individual
    field oddities (bad quantity, missing metafields) never fail the cart.
    """
    doc = _load_document(raw)

    cart = doc.get("cart")
    raw_items = cart.get("line_items") if isinstance(cart, dict) else None
    if not isinstance(raw_items, list):
        raise MalformedInput("Invalid input: missing cart.line_items")

    items: List[LineItem] = []
    for pos, raw_item in enumerate(raw_items):
        if not isinstance(raw_item, dict):
            raise MalformedInput(f"Invalid input: line item {pos} is not an object")
        try:
            item = LineItem(**_flatten_line_item(raw_item))
        except ValidationError as e:
            raise MalformedInput(
                f"Invalid input: line item {pos} has no usable id",
                context={"errors": e.errors()},
            ) from e
        trace("line_item.normalized", {
            "id": item.id,
            "quantity": item.quantity,
            "metafields": len(item.metafields),
        })
        items.append(item)

    trace("cart.parsed", {"line_items": len(items)})
    return Cart(line_items=items, currency_rate=_currency_rate(doc))
