import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from outage_board.config import Settings, get_settings
from outage_board.database import build_engine, build_session_factory, init_db
from outage_board.errors import OutageBoardError
from outage_board.models.outage import utcnow
from outage_board.schemas.outage import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    logger.info("Outage board ready")
    yield
    app.state.engine.dispose()


def create_app(
    settings: Settings | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    """Build the API around an explicit settings object and its own engine."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Outage Board",
        description="Community outage reports with confirmation-based confidence",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    from outage_board.routers import outages

    app.include_router(outages.router, prefix="/api")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="ok", timestamp=app.state.clock())

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OutageBoardError)
    async def outage_error(request: Request, exc: OutageBoardError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_invalid(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        msg = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": msg})

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Server error"})


app = create_app()
