"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clockistry.config import settings
from clockistry.database import database
from clockistry.errors import StoreUnavailable
from clockistry.events import broker
from clockistry.logging_config import configure_logging
from clockistry.routers import auth, timers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    configure_logging(settings.log_level)
    broker.queue_size = settings.event_queue_size
    await database.connect()
    yield
    # Shutdown
    await database.disconnect()


app = FastAPI(
    title="Clockistry Timer API",
    description="Timer lifecycle and time entry API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    """Report store outages as 503 so clients can decide whether to retry."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc) or "Time entry store unavailable"},
    )


# Include routers
app.include_router(auth.router)
app.include_router(timers.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Clockistry Timer API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
