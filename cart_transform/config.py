import os

from cart_transform.schemas.models import TransformOptions
from cart_transform.utils.common import parse_decimal

LEGACY_ADDON_PRICE: str = os.getenv("LEGACY_ADDON_PRICE", "19.99")

LOG_LEVEL       = os.getenv("LOG_LEVEL", "INFO").upper()
TRACE_TRANSFORM = os.getenv("TRACE_TRANSFORM", "").strip().lower() in {"1", "true", "yes", "on"}


def build_options() -> TransformOptions:
    """Host settings -> options injected into the transform."""
    return TransformOptions(legacy_addon_price=parse_decimal(LEGACY_ADDON_PRICE))
