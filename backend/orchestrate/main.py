import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orchestrate.config import Settings, get_settings
from orchestrate.database import Database
from orchestrate.errors import InternalError, OrchestrateError

# Import routes
from orchestrate.routes import auth, bookings, tasks, projects, users

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API. The app owns the database engine for its lifetime."""
    settings = settings or get_settings()
    configure_logging(settings)

    database = database or Database(settings.DATABASE_URL)
    database.create_all()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        database.dispose()

    app = FastAPI(
        title="Orchestrate API",
        description="Project/task management and boardroom booking",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(OrchestrateError)
    async def handle_domain_error(request: Request, exc: OrchestrateError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content={"detail": error.message, "code": error.code})

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])

    # Root endpoint
    @app.get("/")
    def root():
        return {
            "message": "Orchestrate API is running",
            "status": "running",
            "docs": "/docs"
        }

    # Health check
    @app.get("/health")
    def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT}

    return app


def run() -> None:
    uvicorn.run("orchestrate.main:create_app", factory=True, host="0.0.0.0", port=4000)


if __name__ == "__main__":
    run()
