import logging
import socket

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from poolwatch.system import read_system_info

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/systeminfo")
def system_info(request: Request):
    # failures here affect this endpoint only
    try:
        info = read_system_info(request.app.state.thread_inspector)
    except socket.gaierror as e:
        logger.error(f"Unable to resolve host name: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "HOST_NAME_UNRESOLVED", "reason": str(e)},
        )
    except OSError as e:
        logger.error(f"Unable to enumerate threads: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "THREADS_UNAVAILABLE", "reason": str(e)},
        )

    return info.to_dict()
