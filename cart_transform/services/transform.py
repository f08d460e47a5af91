from typing import List, Optional

from cart_transform.errors import MalformedInput, SerializationFailure
from cart_transform.schemas.models import Cart, ResponseEnvelope, TransformOptions
from cart_transform.services.addon_extractor import DEFAULT_OPTIONS, extract_addon
from cart_transform.services.normalizer import RawDocument, parse_cart
from cart_transform.services.output_assembler import SERIALIZATION_ERROR, assemble, encode, serialize
from cart_transform.services.price_resolver import resolve_price
from cart_transform.utils.tracing import Tracer, null_tracer


def transform_cart(
    cart: Cart,
    options: TransformOptions = DEFAULT_OPTIONS,
    trace: Tracer = null_tracer,
) -> ResponseEnvelope:
    """Canonical cart -> price overrides (extract, resolve, assemble)."""
    prices: List[Optional[str]] = []
    for item in cart.line_items:
        selection = extract_addon(
            item.properties, item.metafields, options=options, trace=trace, line_item_id=item.id
        )
        if selection is None:
            prices.append(None)
            continue
        adjusted = resolve_price(item.price, selection.price, trace=trace)
        trace("price.resolved", {
            "id": item.id,
            "base": item.price,
            "addon": selection.price,
            "adjusted": adjusted,
        })
        prices.append(adjusted)

    envelope = assemble(cart, prices)
    trace("cart.transformed", {"line_items": len(cart.line_items), "updates": len(envelope.updates)})
    return envelope


def error_document(message: str) -> str:
    try:
        return encode({"error": message})
    except SerializationFailure:
        return SERIALIZATION_ERROR


def transform_document(
    raw: RawDocument,
    options: TransformOptions = DEFAULT_OPTIONS,
    trace: Tracer = null_tracer,
) -> ResponseEnvelope:
    """
    Parse and transform one document. Raises MalformedInput when the
    document itself is unusable; callers decide how to report it.
    """
    try:
        cart = parse_cart(raw, trace=trace)
    except MalformedInput as e:
        trace("cart.rejected", {"code": e.code, "message": e.message})
        raise
    return transform_cart(cart, options=options, trace=trace)


def transform(
    raw: RawDocument,
    options: TransformOptions = DEFAULT_OPTIONS,
    trace: Tracer = null_tracer,
) -> str:
    """
    Full pipeline on one document. Always returns JSON text: the response
    envelope, or {"error": ...} when the document itself is unusable.
    """
    try:
        envelope = transform_document(raw, options=options, trace=trace)
    except MalformedInput as e:
        return error_document(e.message)
    return serialize(envelope)
