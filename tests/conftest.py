import json

import pytest
from fastapi.testclient import TestClient


class TraceRecorder:
    """Collects transform trace events instead of printing them."""

    def __init__(self):
        self.events = []

    def __call__(self, event, fields):
        self.events.append((event, dict(fields)))

    @property
    def names(self):
        return [name for name, _ in self.events]


@pytest.fixture()
def trace():
    return TraceRecorder()


@pytest.fixture()
def make_item():
    def _make(id="1", price="10.00", properties="{}", quantity=1, **extra):
        item = {"id": id, "price": price, "quantity": quantity, "properties": properties}
        item.update(extra)
        return item
    return _make


@pytest.fixture()
def make_doc():
    def _make(*items, **top):
        doc = {"cart": {"line_items": list(items)}}
        doc.update(top)
        return json.dumps(doc)
    return _make


@pytest.fixture()
def client():
    from cart_transform.main import app

    with TestClient(app) as client:
        yield client
