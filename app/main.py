import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.exceptions import (
    BusinessManagerException,
    CrossOwnerReferenceError,
    DanglingReferenceError,
    MalformedPayloadError,
    NotFoundError,
    RecordValidationError,
    ReferentialIntegrityError,
    StorageError,
    UnauthorizedException,
    UniqueConstraintError,
)
from app.domain.registry import OWNER_KIND, build_registry
from app.logging_config import configure_logging
from app.routes import user_routes
from app.routes.entity_routes import build_entity_router

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)
app.state.registry = build_registry()

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Most specific class wins; the base class is the fallback
ERROR_STATUS = {
    MalformedPayloadError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedException: status.HTTP_401_UNAUTHORIZED,
    CrossOwnerReferenceError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ReferentialIntegrityError: status.HTTP_409_CONFLICT,
    UniqueConstraintError: status.HTTP_409_CONFLICT,
    RecordValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DanglingReferenceError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: BusinessManagerException) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=exc.to_dict(),
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(BusinessManagerException)
async def business_exception_handler(request: Request, exc: BusinessManagerException):
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content=exc.to_dict())


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(user_routes.router, prefix="/api/users", tags=["Users"])
for kind in app.state.registry.kinds():
    if kind == OWNER_KIND:
        continue
    spec = app.state.registry.get(kind)
    app.include_router(
        build_entity_router(spec),
        prefix=f"/api/{spec.route}",
        tags=[spec.route.replace("-", " ").title()],
    )
