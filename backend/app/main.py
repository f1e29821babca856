from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.api.routers import health as health_router
from app.api.routers import objects as objects_router
from app.core.config import Settings, get_settings
from app.core.cors import OriginPolicy, OriginPolicyMiddleware
from app.services.objects import ObjectService
from app.services.storage import StorageService


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request"},
    )


def create_app(
    settings: Settings | None = None,
    storage: StorageService | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    storage = storage or StorageService(settings)
    origin_policy = OriginPolicy(settings.allowed_origins)

    app = FastAPI(
        debug=settings.debug,
        title="Presigned Storage API",
    )
    app.state.settings = settings
    app.state.origin_policy = origin_policy
    app.state.object_service = ObjectService(storage, allow_svg=settings.allow_svg_uploads)

    app.add_middleware(OriginPolicyMiddleware, policy=origin_policy)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health_router.router)
    app.include_router(objects_router.router)

    return app


app = create_app()
