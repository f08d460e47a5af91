import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator

# wire contract: top-level key of the response envelope
ENVELOPE_KEY = "operation"

# ---------------------------------------------------------------------
# INPUT (canonical cart)
# ---------------------------------------------------------------------

class Metafield(BaseModel):
    """Legacy namespaced annotation; only the add-on sentinel means anything."""
    namespace: str = ""
    key: str = ""
    value: Any = None

    class Config:
        extra = "ignore"
        frozen = True

    @validator("namespace", "key", pre=True)
    def v_text(cls, v):
        return "" if v is None else str(v)


class LineItem(BaseModel):
    """Single line of the cart, product fields already flattened."""
    id: str
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    product_title: Optional[str] = None
    price: str = "0"
    quantity: int = 0
    properties: str = ""   # JSON text, parsed again by the extractor
    metafields: List[Metafield] = Field(default_factory=list)

    class Config:
        extra = "ignore"
        frozen = True

    @validator("id", pre=True)
    def v_id(cls, v):
        # numeric ids are common in older carts
        if isinstance(v, (int, Decimal)) and not isinstance(v, bool):
            return str(v)
        return v

    @validator("product_id", "variant_id", "product_title", pre=True)
    def v_optional_text(cls, v):
        if v is None or isinstance(v, (dict, list)):
            return None
        return str(v)

    @validator("price", pre=True)
    def v_price(cls, v):
        if v is None or isinstance(v, (bool, dict, list)):
            return "0"
        return str(v)

    @validator("quantity", pre=True)
    def v_quantity(cls, v):
        return _unsigned_quantity(v)

    @validator("properties", pre=True)
    def v_properties(cls, v):
        if isinstance(v, str):
            return v
        if isinstance(v, dict):
            # some storefront adapters send the bag already decoded
            return json.dumps(v, default=str)
        return ""

    @validator("metafields", pre=True)
    def v_metafields(cls, v):
        if not isinstance(v, list):
            return []
        return [m for m in v if isinstance(m, dict)]


class Cart(BaseModel):
    """Ordered line items of one transform call."""
    line_items: List[LineItem] = Field(default_factory=list)
    currency_rate: Optional[str] = None  # observed on the wire, never used

    class Config:
        frozen = True


MAX_QUANTITY_DIGITS = 18


def _unsigned_quantity(v) -> int:
    # longer than MAX_QUANTITY_DIGITS is not a quantity
    if isinstance(v, bool):
        return 0
    if isinstance(v, int):
        return v if 0 <= v < 10 ** MAX_QUANTITY_DIGITS else 0
    if isinstance(v, Decimal):
        if not v.is_finite() or v < 0 or v.adjusted() >= MAX_QUANTITY_DIGITS:
            return 0
        if v != v.to_integral_value():
            return 0
        return int(v)
    if isinstance(v, str):
        s = v.strip()
        if len(s) > MAX_QUANTITY_DIGITS + 1:
            return 0
        try:
            n = int(s)
        except ValueError:
            return 0
        return n if 0 <= n < 10 ** MAX_QUANTITY_DIGITS else 0
    return 0


# ---------------------------------------------------------------------
# PIPELINE VALUES
# ---------------------------------------------------------------------

class TransformOptions(BaseModel):
    """Business constants injected into the transform."""
    legacy_addon_price: Decimal = Decimal("19.99")

    class Config:
        frozen = True


class AddOnSelection(BaseModel):
    """Add-on found on a line item. Only price reaches the resolver."""
    price: str
    source: str  # "addon" | "legacy_properties" | "legacy_metafield"
    addon_type: Optional[str] = None
    name: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None

    class Config:
        frozen = True

# ---------------------------------------------------------------------
# OUTPUT
# ---------------------------------------------------------------------

class PriceOverride(BaseModel):
    line_item_id: str
    adjusted_price: str  # exactly two fractional digits

    class Config:
        frozen = True

    def to_wire(self) -> Dict[str, Any]:
        return {"id": self.line_item_id, "price": {"adjustment_fixed_price": self.adjusted_price}}


class ResponseEnvelope(BaseModel):
    updates: List[PriceOverride] = Field(default_factory=list)

    class Config:
        frozen = True

    def to_wire(self) -> Dict[str, Any]:
        return {ENVELOPE_KEY: {"update": [u.to_wire() for u in self.updates]}}


class HealthResponse(BaseModel):
    """Response schema for GET /cart-transform."""
    ok: bool = True
    message: str = "Cart Transform endpoint is reachable"
