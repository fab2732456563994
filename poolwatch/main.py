import logging
from contextlib import asynccontextmanager

from anyio import to_thread
from fastapi import FastAPI
from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector

from poolwatch import config
from poolwatch.metrics import PrometheusSink
from poolwatch.pools import LimiterPool, PoolRegistry, bind_pool_gauges
from poolwatch.routers import health, load, metrics, systeminfo
from poolwatch.sampler import ThreadUtilizationSampler
from poolwatch.threads import ThreadInspector, default_inspector

# -----------------------------
# Logging
# -----------------------------
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

DEFAULT_POOL = "anyio-default"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The default limiter is bound to the running event loop, so it can
    # only be looked up from here.
    limiter = to_thread.current_default_thread_limiter()
    limiter.total_tokens = config.WORKER_THREADS
    logger.info(f"Worker thread pool capacity: {config.WORKER_THREADS}")

    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    sink = PrometheusSink(registry)
    app.state.metrics_registry = registry

    ThreadUtilizationSampler(app.state.thread_inspector).bind(sink)

    pools = app.state.pools
    pools.register(DEFAULT_POOL, LimiterPool(limiter))
    bind_pool_gauges(pools, sink)

    yield

    pools.unregister(DEFAULT_POOL)


def create_app(thread_inspector: ThreadInspector | None = None, pools: PoolRegistry | None = None) -> FastAPI:
    app = FastAPI(title="poolwatch", version="1.0.0", lifespan=lifespan)
    app.state.thread_inspector = thread_inspector or default_inspector()
    app.state.pools = pools if pools is not None else PoolRegistry()

    # Routers
    app.include_router(load.router)
    app.include_router(systeminfo.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    return app


app = create_app()
