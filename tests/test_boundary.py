import io
import json

from cart_transform import cli
from cart_transform.boundary import process_cart

ADDON = '{"addon": {"price": "1.54"}}'


def test_bytes_in_bytes_out(make_doc, make_item):
    out = process_cart(make_doc(make_item(id="1", price="100.00", properties=ADDON)).encode("utf-8"))

    assert isinstance(out, bytes)
    assert out == b'{"operation":{"update":[{"id":"1","price":{"adjustment_fixed_price":"101.54"}}]}}'


def test_buffer_types_agree(make_doc, make_item):
    raw = make_doc(make_item(properties=ADDON)).encode("utf-8")

    assert process_cart(raw) == process_cart(bytearray(raw)) == process_cart(memoryview(raw)) == process_cart(raw.decode())


def test_caller_buffer_untouched(make_doc, make_item):
    raw = bytearray(make_doc(make_item(properties=ADDON)).encode("utf-8"))
    before = bytes(raw)

    process_cart(raw)

    assert bytes(raw) == before


def test_errors_are_returned_not_raised():
    assert "error" in json.loads(process_cart(b"\x00\xffgarbage"))
    assert "error" in json.loads(process_cart(b'{"cart": null}'))


def test_cli_success(make_doc, make_item):
    stdout = io.BytesIO()
    status = cli.main(stdin=io.BytesIO(make_doc().encode("utf-8")), stdout=stdout)

    assert status == 0
    assert stdout.getvalue() == b'{"operation":{"update":[]}}'


def test_cli_rejected_document():
    stdout = io.BytesIO()
    status = cli.main(stdin=io.BytesIO(b"not json"), stdout=stdout)

    assert status == 1
    assert "error" in json.loads(stdout.getvalue())


def test_deeply_nested_properties_at_boundary(make_doc, make_item):
    out = process_cart(make_doc(make_item(properties="[" * 100000)).encode("utf-8"))

    assert out == b'{"operation":{"update":[]}}'
