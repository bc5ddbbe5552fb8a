import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.config import Settings, settings
from app.core.exceptions import ContractLifecycleError
from app.core.firebase import FirebaseClient
from app.core.logging import configure_logging
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    firebase = FirebaseClient(app.state.settings)
    firebase.init()
    app.state.firebase = firebase
    try:
        yield
    finally:
        firebase.close()


async def handle_app_error(request: Request, exc: ContractLifecycleError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, details=exc.details).model_dump(),
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="Validation failed", details=details).model_dump(),
    )


def create_app(app_settings: Settings = settings) -> FastAPI:
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(title=app_settings.PROJECT_NAME, lifespan=lifespan)
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ContractLifecycleError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    @app.get("/healthz", tags=["health"])
    def root_health() -> dict[str, str]:
        """Basic health endpoint."""
        return {"status": "ok"}

    app.include_router(api_router, prefix=app_settings.API_V1_PREFIX)
    return app


app = create_app()
