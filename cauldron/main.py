from fastapi import FastAPI
import logging

from cauldron.api.routes import router
from cauldron.config import settings_from_env
from cauldron.runtime import init_processor

settings = settings_from_env()

app = FastAPI(title="cauldron", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    processor = init_processor(options=settings.parser)
    logger.info("Processor ready (%d games tracked)", len(processor.tracker))


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "cauldron", "version": "0.1.0"}
