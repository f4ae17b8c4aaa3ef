import logging

import uvicorn
from fastapi import FastAPI

from area_agent.api.endpoints import router as api_router
from area_agent.config.settings import settings

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Area Resolution Agent API",
    description="Assigns patients and volunteers to doctor-drawn areas from coordinates or addresses.",
    version="1.0.0",
)


@app.get("/health", status_code=200, tags=["Health"])
def healthcheck():
    return {"status": "ok"}

app.include_router(api_router)


def run():
    logger.info(f"Starting Area Resolution Agent API on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "area_agent.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    run()
