import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from cart_transform import config
from cart_transform.errors import MalformedInput
from cart_transform.schemas.models import HealthResponse
from cart_transform.services.output_assembler import serialize
from cart_transform.services.transform import transform_document
from cart_transform.utils.tracing import logging_tracer, null_tracer

log = logging.getLogger(__name__)
router = APIRouter(tags=["cart-transform"])


def _tracer():
    return logging_tracer(log) if config.TRACE_TRANSFORM else null_tracer


@router.get("/cart-transform", response_model=HealthResponse)
def health() -> HealthResponse:
    """Lets an operator confirm the callback URL is reachable."""
    log.info("[cart-transform] GET health check")
    return HealthResponse()


@router.post("/cart-transform")
async def cart_transform(request: Request):
    """
    Cart transform callback: the host POSTs the cart, we answer with
    {"operation": {"update": [...]}} for every line carrying an add-on.
    """
    body = await request.body()
    try:
        envelope = transform_document(
            body, options=request.app.state.transform_options, trace=_tracer()
        )
    except MalformedInput as e:
        log.warning("[cart-transform] rejected: %s", e.message)
        return JSONResponse(content={"error": e.message}, status_code=400)

    log.info("[cart-transform] updates=%d", len(envelope.updates))
    return Response(content=serialize(envelope), media_type="application/json")
