"""
Storefront - Backend API
Checkout and cart service
"""
import time
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from app.api import orders, cart
from app.core.config import settings
from app.core.database import check_database_connection
from app.core.logging_config import setup_logging

setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def structured_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Errors raised with a dict detail ({success, message, code}) are returned as the body itself"""
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=getattr(exc, "headers", None))
    return await http_exception_handler(request, exc)


# Include API routers
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "Storefront API",
        "status": "online",
        "version": settings.API_VERSION
    }


@app.get("/health")
def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()

    db_status = "unknown"
    db_latency_ms = None
    db_error = None

    try:
        # Minimal retry (fast check)
        db_latency_ms = round(check_database_connection(max_retries=1, retry_delay=0.5), 2)
        db_status = "connected"
    except Exception as e:
        db_status = "disconnected"
        if settings.is_development:
            db_error = str(e)

    total_latency_ms = round((time.time() - start_time) * 1000, 2)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "storefront-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error
        },
        "total_latency_ms": total_latency_ms
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
