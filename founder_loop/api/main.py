"""FastAPI application entry point for Founder Loop."""

from fastapi import FastAPI

from founder_loop.api.middleware.logging_middleware import LoggingMiddleware
from founder_loop.api.routes.health import router as health_router
from founder_loop.api.routes.participant_loop import router as participant_loop_router

app = FastAPI(
    title="Founder Loop API",
    description="Weekly revenue accountability loop engine",
    version="0.1.0",
)

app.add_middleware(LoggingMiddleware)
app.include_router(health_router)
app.include_router(participant_loop_router)
