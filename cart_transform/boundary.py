"""
Host boundary.

Plugin hosts hand over one input buffer and take back one output buffer.
This is the only place that deals with buffers: the transform itself
works on text and pydantic models and never sees how the bytes arrived.
"""
from typing import Optional, Union

from cart_transform.schemas.models import TransformOptions
from cart_transform.services.addon_extractor import DEFAULT_OPTIONS
from cart_transform.services.transform import transform
from cart_transform.utils.tracing import Tracer, null_tracer

ENCODING = "utf-8"


def process_cart(
    buffer: Union[bytes, bytearray, memoryview, str],
    options: Optional[TransformOptions] = None,
    trace: Tracer = null_tracer,
) -> bytes:
    """
    Input buffer -> newly allocated output buffer.

    The caller keeps ownership of ``buffer`` (it is copied, never retained)
    and owns the returned bytes. Never raises for bad input; a document
    that cannot be used comes back as {"error": "..."}.
    """
    if isinstance(buffer, memoryview):
        buffer = buffer.tobytes()
    result = transform(buffer, options=options or DEFAULT_OPTIONS, trace=trace)
    return result.encode(ENCODING)
