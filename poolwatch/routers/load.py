import logging
import math
import threading

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from poolwatch import config

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def burn_cpu():
    """
    Intentionally burn CPU on the worker thread serving this request.
    A plain `def` endpoint runs on the worker thread pool, which is what
    keeps one pool thread busy per in-flight request.
    """
    thread_name = threading.current_thread().name
    logger.info(f"Handling request in thread {thread_name}")

    debug = logger.isEnabledFor(logging.DEBUG)
    for i in range(config.BURN_ITERATIONS):
        j = math.pow(i, 2)
        if debug:
            logger.debug(f"Result: {j}")

    return f"Thread: {thread_name}"
