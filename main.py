import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from hop_service.api.v1 import links, redirect
from hop_service.config import settings
from hop_service.database.connection import init_db
from hop_service.dependencies import close_cache_accessor, init_cache_accessor
from hop_service.exceptions import (
    KeyGenerationExhaustedError,
    StoreConsistencyError,
    ValidationError,
)
from hop_service.logging_config import configure_logging
from hop_service.security import ApiKeyAuthConfig, ApiKeyAuthMiddleware

configure_logging()
logger = logging.getLogger("hop_service.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db()
    accessor = await init_cache_accessor()
    logger.info(
        "%s %s started (cache %s)",
        settings.app_name, settings.app_version,
        "enabled" if accessor.enabled else "disabled",
    )
    yield
    # Shutdown
    await close_cache_accessor()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A link shortener service built with FastAPI",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    ApiKeyAuthMiddleware,
    config=ApiKeyAuthConfig.build(
        api_key=settings.api_key,
        header_name=settings.api_key_header,
        exempt_paths=settings.auth_exempt_paths,
    ),
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


@app.exception_handler(KeyGenerationExhaustedError)
async def key_generation_exhausted_handler(request: Request, exc: KeyGenerationExhaustedError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Could not create a short link, try again later"},
    )


@app.exception_handler(StoreConsistencyError)
async def store_consistency_handler(request: Request, exc: StoreConsistencyError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/info")
def read_info():
    """Service information endpoint"""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(links.router, prefix="/api/v1")
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
