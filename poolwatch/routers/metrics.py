from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


# async so a scrape is served on the event loop, not on a busy worker thread
@router.get("/metrics", include_in_schema=False)
async def metrics(request: Request) -> Response:
    return Response(
        content=generate_latest(request.app.state.metrics_registry),
        media_type=CONTENT_TYPE_LATEST,
    )
