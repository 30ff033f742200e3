import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI

from . import __version__, config, metrics
from .pipeline import generation_router, image_router, studio_router
from .pipeline.orchestrator import StudioService
from .pipeline.routes import get_service

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Studio starting up...")
    metrics.set_gauge("start_time", time.time())
    yield
    if await get_service().cancel_generation():
        logger.warning("Shutdown cancelled a running generation")
    logger.info("Studio shutting down...")


app = FastAPI(title="Visionary Studio", version=__version__, lifespan=lifespan)
app.include_router(image_router)
app.include_router(generation_router)
app.include_router(studio_router)


@app.get("/health")
def health_check(service: StudioService = Depends(get_service)):
    """Verify the service is running and whether a key is selected."""
    return {
        "status": "ok",
        "api_key_selected": service.credentials.has_credential(),
        "images": len(service.images),
        "generating": service.get_status().is_generating,
    }


@app.get("/metrics")
def metrics_endpoint():
    """Return a snapshot of all studio metrics."""
    return metrics.get_snapshot()


def run():
    uvicorn.run("studio.main:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
