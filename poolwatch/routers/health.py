from fastapi import APIRouter, Response

from poolwatch import config

router = APIRouter(prefix="/health")


@router.get("")
def health_check():
    if config.SIMULATE_FAIL.lower() == "true":
        return Response(status_code=500)

    return {"status": "healthy", "service": "poolwatch"}
