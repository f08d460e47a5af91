import json
import logging
import sys

from dotenv import load_dotenv

from cart_transform.boundary import process_cart
from cart_transform.utils.tracing import logging_tracer, null_tracer

log = logging.getLogger(__name__)


def main(stdin=None, stdout=None) -> int:
    """
    Read one cart document from stdin, write the transform output to stdout.
    Exit status 1 when the document was rejected; the error object is still
    written so the host can read it.
    """
    load_dotenv()
    from cart_transform import config  # after load_dotenv, config reads env at import

    logging.basicConfig(level=config.LOG_LEVEL, stream=sys.stderr)
    stdin = sys.stdin.buffer if stdin is None else stdin
    stdout = sys.stdout.buffer if stdout is None else stdout
    trace = logging_tracer(log) if config.TRACE_TRANSFORM else null_tracer

    out = process_cart(stdin.read(), options=config.build_options(), trace=trace)
    stdout.write(out)
    stdout.flush()

    if "error" in json.loads(out):
        log.warning("cart rejected: %s", out.decode("utf-8"))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
