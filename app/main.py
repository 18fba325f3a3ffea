from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.core.config import settings
from app.api.router import api_router
from app.api.responses import error_response
from app.db.async_session import startup_async_database, shutdown_async_database
from app.services.weight_validation import WeightEntryError, WeightErrorKind

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors (auth failures, unknown routes) in the client's envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """A body that is not a JSON object carries none of the required fields."""
    logger.warning(f"Unreadable request body on {request.url.path}: {exc.errors()}")
    return error_response(WeightEntryError(WeightErrorKind.MISSING_REQUIRED_FIELDS))


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    try:
        logger.info("Starting up Wellnest API...")
        await startup_async_database()
        logger.info("Wellnest API startup completed successfully")
    except Exception as e:
        logger.error(f"Failed to start up application: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up services on application shutdown."""
    logger.info("Shutting down Wellnest API...")
    await shutdown_async_database()
    logger.info("Wellnest API shutdown completed successfully")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Welcome to Wellnest API"}
