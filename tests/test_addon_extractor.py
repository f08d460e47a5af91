import json
from decimal import Decimal

import pytest

from cart_transform.schemas.models import Metafield, TransformOptions
from cart_transform.services.addon_extractor import extract_addon

SENTINEL = Metafield(namespace="cdh_shoplazza_addon", key="addon_selected", value="true")


def props(**fields):
    return json.dumps(fields)


def test_structured_string_price():
    sel = extract_addon(props(addon={"price": "1.54", "type": "protection", "name": "Care"}))

    assert sel.price == "1.54"
    assert sel.source == "addon"
    assert sel.addon_type == "protection"
    assert sel.name == "Care"


def test_structured_number_price_gets_two_decimals():
    assert extract_addon('{"addon": {"price": 1.5}}').price == "1.50"


def test_structured_integer_price():
    assert extract_addon('{"addon": {"price": 2}}').price == "2.00"


def test_structured_string_price_stripped():
    assert extract_addon(props(addon={"price": " $1.54 "})).price == "1.54"


@pytest.mark.parametrize("price", [True, None, {"amount": "1"}, ["1"]])
def test_structured_unsupported_price_yields_nothing(price):
    assert extract_addon(props(addon={"price": price})) is None


def test_structured_without_price_falls_through_to_legacy():
    sel = extract_addon(props(
        addon={"name": "no price"},
        _add_on_type="protection_plan",
        _add_on_price="4.99",
    ))

    assert sel.source == "legacy_properties"
    assert sel.price == "4.99"


def test_structured_without_price_falls_through_to_metafield():
    sel = extract_addon(props(addon={"name": "no price"}), [SENTINEL])

    assert sel.source == "legacy_metafield"
    assert sel.price == "19.99"


def test_addon_must_be_an_object():
    assert extract_addon(props(addon="1.54")) is None


def test_legacy_flat_properties():
    sel = extract_addon(props(
        _add_on_type="protection_plan",
        _add_on_price="4.99",
        _add_on_name="Protection Plan",
        _add_on_sku="PP-1",
        _add_on_description="2 years",
    ))

    assert sel.price == "4.99"
    assert sel.source == "legacy_properties"
    assert sel.name == "Protection Plan"
    assert sel.sku == "PP-1"
    assert sel.description == "2 years"


def test_legacy_flat_requires_protection_plan_type():
    assert extract_addon(props(_add_on_type="gift_wrap", _add_on_price="4.99")) is None


def test_legacy_flat_without_price_falls_through():
    sel = extract_addon(props(_add_on_type="protection_plan"), [SENTINEL])

    assert sel.source == "legacy_metafield"


def test_metafield_sentinel_uses_legacy_price():
    sel = extract_addon("{}", [SENTINEL])

    assert sel.price == "19.99"
    assert sel.source == "legacy_metafield"


def test_metafield_boolean_true_counts():
    mf = Metafield(namespace="cdh_shoplazza_addon", key="addon_selected", value=True)

    assert extract_addon("{}", [mf]).price == "19.99"


@pytest.mark.parametrize("mf", [
    Metafield(namespace="cdh_shoplazza_addon", key="addon_selected", value="false"),
    Metafield(namespace="cdh_shoplazza_addon", key="addon_selected", value="TRUE"),
    Metafield(namespace="other", key="addon_selected", value="true"),
    Metafield(namespace="cdh_shoplazza_addon", key="other", value="true"),
])
def test_non_matching_metafields_ignored(mf):
    assert extract_addon("{}", [mf]) is None


def test_legacy_price_is_injected():
    options = TransformOptions(legacy_addon_price=Decimal("5"))

    assert extract_addon("{}", [SENTINEL], options=options).price == "5.00"


def test_unparsable_properties_fall_through_to_metafield(trace):
    sel = extract_addon("not json", [SENTINEL], trace=trace, line_item_id="1")

    assert sel.source == "legacy_metafield"
    assert "addon.properties_unparsable" in trace.names


def test_unparsable_properties_without_metafield():
    assert extract_addon("not json") is None


def test_deeply_nested_properties_are_unparsable(trace):
    deep = "[" * 100000

    assert extract_addon(deep) is None
    sel = extract_addon(deep, [SENTINEL], trace=trace, line_item_id="1")
    assert sel.source == "legacy_metafield"
    assert "addon.properties_unparsable" in trace.names


@pytest.mark.parametrize("raw", ["", "   ", "[1, 2]", '"text"', "42"])
def test_non_object_properties_are_absent(raw):
    assert extract_addon(raw) is None


def test_structured_addon_wins_over_metafield():
    sel = extract_addon(props(addon={"price": "1.54"}), [SENTINEL])

    assert sel.price == "1.54"
    assert sel.source == "addon"


def test_structured_addon_wins_over_legacy_flat():
    sel = extract_addon(props(
        addon={"price": "1.54"},
        _add_on_type="protection_plan",
        _add_on_price="4.99",
    ))

    assert sel.price == "1.54"


def test_no_signal():
    assert extract_addon(props(color="red"), []) is None


def test_selected_event(trace):
    extract_addon(props(addon={"price": "1.54"}), trace=trace, line_item_id="9")

    name, fields = trace.events[-1]
    assert name == "addon.selected"
    assert fields["id"] == "9"
    assert fields["source"] == "addon"
