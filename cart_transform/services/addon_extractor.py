"""
Add-on extractor: one line item -> optional AddOnSelection.

Three encodings have been used over time to carry an add-on through the
properties bag and product metafields. They are tried in order, first hit
wins:

1. structured ``addon`` object in properties (current widget)
2. flat ``_add_on_*`` properties with ``_add_on_type == "protection_plan"``
3. the ``cdh_shoplazza_addon/addon_selected`` metafield flag

The metafield path carries no price at all. It is a boolean mapped to the
configured legacy price (TransformOptions.legacy_addon_price) and is kept
that coarse on purpose: old carts were priced that way.
"""
from typing import Any, Dict, Iterable, Optional

from cart_transform.errors import PropertiesParseFailure
from cart_transform.schemas.models import AddOnSelection, Metafield, TransformOptions
from cart_transform.utils.common import loads_object, money, number_price, strip_price
from cart_transform.utils.tracing import Tracer, null_tracer

LEGACY_ADDON_TYPE = "protection_plan"
METAFIELD_NAMESPACE = "cdh_shoplazza_addon"
METAFIELD_KEY = "addon_selected"

DEFAULT_OPTIONS = TransformOptions()


def _price_text(value: Any) -> Optional[str]:
    """str -> stripped verbatim, number -> 2dp, anything else -> None."""
    if isinstance(value, str):
        return strip_price(value)
    return number_price(value)


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _from_addon_object(props: Dict[str, Any]) -> Optional[AddOnSelection]:
    addon = props.get("addon")
    if not isinstance(addon, dict):
        return None
    price = _price_text(addon.get("price"))
    if price is None:
        return None
    return AddOnSelection(
        price=price,
        source="addon",
        addon_type=_text(addon.get("type")),
        name=_text(addon.get("name")),
        sku=_text(addon.get("sku")),
        description=_text(addon.get("description")),
    )


def _from_legacy_properties(props: Dict[str, Any]) -> Optional[AddOnSelection]:
    if props.get("_add_on_type") != LEGACY_ADDON_TYPE:
        return None
    price = _price_text(props.get("_add_on_price"))
    if price is None:
        return None
    return AddOnSelection(
        price=price,
        source="legacy_properties",
        addon_type=LEGACY_ADDON_TYPE,
        name=_text(props.get("_add_on_name")),
        sku=_text(props.get("_add_on_sku")),
        description=_text(props.get("_add_on_description")),
    )


def _flag_set(value: Any) -> bool:
    return value == "true" or value is True


def _from_metafields(metafields: Iterable[Metafield], options: TransformOptions) -> Optional[AddOnSelection]:
    for mf in metafields:
        if mf.namespace == METAFIELD_NAMESPACE and mf.key == METAFIELD_KEY and _flag_set(mf.value):
            return AddOnSelection(price=money(options.legacy_addon_price), source="legacy_metafield")
    return None


def extract_addon(
    properties: str,
    metafields: Iterable[Metafield] = (),
    options: TransformOptions = DEFAULT_OPTIONS,
    trace: Tracer = null_tracer,
    line_item_id: Optional[str] = None,
) -> Optional[AddOnSelection]:
    """Resolve at most one add-on selection. Never raises."""
    try:
        props = loads_object(properties)
    except PropertiesParseFailure as e:
        trace("addon.properties_unparsable", {"id": line_item_id, "code": e.code})
        props = {}

    selection = (
        _from_addon_object(props)
        or _from_legacy_properties(props)
        or _from_metafields(metafields, options)
    )

    if selection is None:
        trace("addon.none", {"id": line_item_id})
    else:
        trace("addon.selected", {
            "id": line_item_id,
            "source": selection.source,
            "price": selection.price,
            "type": selection.addon_type,
            "name": selection.name,
        })
    return selection
