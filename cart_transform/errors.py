"""
Cart transform errors.

Every error carries:
- code: machine-readable code (e.g. "malformed_input")
- message: human-readable message, used verbatim in the error envelope
- context: extra data about the failure

Only MalformedInput ever reaches the caller, and even then as a
structured {"error": ...} document. The others are raised and recovered
inside the component that owns them.
"""

from __future__ import annotations


class CartTransformError(Exception):
    """Base class for all cart transform errors."""

    code = "error"

    def __init__(self, message: str = "", code: str | None = None, context: dict | None = None):
        self.code = code or self.code
        self.message = message
        self.context = context or {}
        super().__init__(message)


class MalformedInput(CartTransformError):
    """The document is not JSON, or has no cart.line_items."""

    code = "malformed_input"


class PropertiesParseFailure(CartTransformError):
    """A line item's properties string is not a JSON object."""

    code = "properties_parse_failure"


class PriceParseFailure(CartTransformError):
    """A price string is not a finite decimal."""

    code = "price_parse_failure"


class SerializationFailure(CartTransformError):
    """The response envelope could not be encoded."""

    code = "serialization_failure"
