from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger

from app.calendar.api import register_exception_handlers
from app.calendar.api import router as calendar_router
from app.config.settings import settings
from app.core.logger import setup_logger
from app.db.session import init_db

setup_logger(level=settings.log_level, log_file=settings.log_file)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Ensure database tables exist before serving requests."""
    logger.info("Ensuring database tables exist")
    init_db()
    yield
    logger.info("Calendar service shutting down")


app = FastAPI(title="Gym Calendar", lifespan=lifespan)

app.include_router(calendar_router)
register_exception_handlers(app)

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


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
