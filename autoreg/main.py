from fastapi import FastAPI, Request
from loguru import logger

from autoreg.api.training import router as training_router
from autoreg.config.settings import settings
from autoreg.core.logger import configure_logging

configure_logging(settings, component="api")

app = FastAPI(title="Autoreg")

app.include_router(training_router)

logger.info("FastAPI application initialized")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.debug(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
    return response
