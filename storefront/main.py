import uvicorn as uvicorn
from fastapi import FastAPI, Request, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
import redis.asyncio as redis
import logging

from storefront.config.settings import settings
from storefront.config.database import startDB
from storefront.routes import userRoute, productRoute, cartRoute, orderRoute, paymentRoute
from storefront.adminUtils.adminRoutes import dashboardRoutes, inventoryRoutes

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def rate_limit(times: int, seconds: int) -> list:
    """RateLimiter dependencies for a router; empty when rate limiting is off"""
    if not settings.RATE_LIMITING_ENABLED:
        return []
    return [Depends(RateLimiter(times=times, seconds=seconds))]


# Initialize FastAPI app with lifespan context
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database connection and models (startup logic)
    client = await startDB()
    logger.info(f"✅ Connected to MongoDB database '{settings.MONGO_DATABASE}'")

    # Initialize rate limiter
    if settings.RATE_LIMITING_ENABLED:
        redis_connection = redis.from_url(settings.REDIS_URL, encoding="utf-8")
        await FastAPILimiter.init(redis_connection)

    yield

    if settings.RATE_LIMITING_ENABLED:
        await FastAPILimiter.close()
    client.close()


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler that formats all errors consistently"""
    error_response = {
        "error": {
            "type": exc.__class__.__name__,
            "message": "An error occurred",
            "detail": str(exc),
            "path": request.url.path,
        }
    }

    status_code = 500

    # Handle HTTP exceptions (404, 401, etc.)
    if isinstance(exc, StarletteHTTPException):
        status_code = exc.status_code
        error_response["error"]["message"] = exc.detail
        error_response["error"]["detail"] = exc.detail

    # Handle validation errors
    elif isinstance(exc, RequestValidationError):
        status_code = 422
        error_response["error"]["message"] = "Validation error"
        error_response["error"]["detail"] = jsonable_encoder(exc.errors())

    # Log unexpected errors
    if status_code == 500:
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        error_response["error"]["message"] = "Internal server error"
        # Don't expose internal details
        error_response["error"]["detail"] = "Please contact support"

    headers = getattr(exc, "headers", None)
    return JSONResponse(
        status_code=status_code,
        content=error_response,
        headers=headers
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)


app = FastAPI(
    title=settings.PLATFORM_NAME,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc"
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(userRoute.router, prefix='/api/v1',
                   dependencies=rate_limit(times=20, seconds=60))
app.include_router(productRoute.router, tags=['products'], prefix='/api/v1',
                   dependencies=rate_limit(times=100, seconds=60))
app.include_router(cartRoute.router, tags=['cart'], prefix='/api/v1',
                   dependencies=rate_limit(times=100, seconds=60))
app.include_router(orderRoute.router, tags=['orders'], prefix='/api/v1',
                   dependencies=rate_limit(times=100, seconds=60))
app.include_router(paymentRoute.router, tags=['payment'], prefix='/api/v1',
                   dependencies=rate_limit(times=10, seconds=60))
app.include_router(dashboardRoutes.router, tags=['AdminDashboard'], prefix='/api/v1/admin',
                   dependencies=rate_limit(times=100, seconds=60))
app.include_router(inventoryRoutes.router, tags=['AdminInventory'], prefix='/api/v1/admin/inventory',
                   dependencies=rate_limit(times=100, seconds=60))


@app.get("/api/healthchecker", dependencies=rate_limit(times=100, seconds=60))
def root():
    return {"message": f"Welcome to {settings.PLATFORM_NAME}"}


if __name__ == "__main__":
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=5001, reload=True, log_level="info")
