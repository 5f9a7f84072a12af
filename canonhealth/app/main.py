"""FastAPI application bootstrap for Canon Health."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, settings as default_settings
from .domain.errors import CanonHealthError
from .infra.db import init_db
from .routers import audit, auth, doctor, documents, patient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Canon Health API ready")
    yield


async def handle_domain_error(request: Request, exc: CanonHealthError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def handle_bad_input(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and queries are client errors like any missing field."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": problems or "Invalid request"},
    )


def create_app(settings: Settings = default_settings) -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Canon Health API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CanonHealthError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_bad_input)

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(patient.router, prefix="/api/patient", tags=["patient"])
    app.include_router(doctor.router, prefix="/api/doctor", tags=["doctor"])
    app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
    app.include_router(audit.router, prefix="/audit", tags=["audit"])

    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "canonhealth.app.main:app",
        host=default_settings.host,
        port=default_settings.port,
    )
