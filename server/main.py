"""
Legendary Signatures API

Storefront and admin console for signed sports memorabilia and
personalized video requests, backed by Firebase.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from datetime import datetime, timezone

from config import API_NAME, API_VERSION, CORS_ORIGINS, DEBUG, ENVIRONMENT, LOG_LEVEL, PORT, STORE_BACKEND
from error_handling import StoreError, global_exception_handler, store_error_handler
from routes import (
    products, categories, orders, checkout, promo_codes, banners,
    customers, admins, profile, cart, videos, auctions, content,
    dashboard, admin_tools
)
import firebase_init

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('app.log') if ENVIRONMENT == "production" else logging.NullHandler()
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown tasks"""
    logger.info(f"=== STARTING {API_NAME.upper()} v{API_VERSION} ===")
    logger.info(f"Environment: {ENVIRONMENT}")
    logger.info(f"Port: {PORT}")
    logger.info(f"Debug mode: {DEBUG}")
    logger.info(f"Document store: {'Firestore' if firebase_init.firestore_available else f'local ({STORE_BACKEND})'}")
    logger.info(f"Storage bucket: {'configured' if firebase_init.bucket is not None else 'in-memory'}")
    logger.info("=== APPLICATION STARTUP COMPLETE ===")
    yield
    logger.info(f"=== SHUTTING DOWN {API_NAME.upper()} ===")


# Create FastAPI application
app = FastAPI(
    title=API_NAME,
    version=API_VERSION,
    description="Signed memorabilia storefront, personalized videos and admin console",
    docs_url="/docs" if DEBUG else None,
    redoc_url="/redoc" if DEBUG else None,
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(StoreError, store_error_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Include routers
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(orders.router)
app.include_router(checkout.router)
app.include_router(promo_codes.router)
app.include_router(banners.router)
app.include_router(customers.router)
app.include_router(admins.router)
app.include_router(profile.router)
app.include_router(cart.router)
app.include_router(videos.router)
app.include_router(auctions.router)
app.include_router(content.router)
app.include_router(dashboard.router)
app.include_router(admin_tools.router)


@app.get("/")
async def read_root():
    """Root endpoint with API information"""
    return {
        "message": API_NAME,
        "version": API_VERSION,
        "status": "running",
        "environment": ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/health")
async def health_check():
    """Document store and storage status"""
    try:
        db_status = "connected"
        try:
            test_ref = firebase_init.db.collection('_health_check').document('test')
            test_ref.set({'timestamp': datetime.now(timezone.utc)})
            test_ref.delete()
        except Exception as e:
            db_status = f"error: {str(e)}"

        services_status = {
            "database": db_status,
            "firestore": "connected" if firebase_init.firestore_available else "local",
            "storage": "available" if firebase_init.bucket is not None else "in-memory",
        }
        is_healthy = db_status == "connected"

        return {
            "status": "healthy" if is_healthy and firebase_init.firestore_available else
                      "degraded" if is_healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": ENVIRONMENT,
            "version": API_VERSION,
            "services": services_status,
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "error": str(e)
            }
        )


@app.get("/api/info")
async def get_api_info():
    """API information and available endpoint groups"""
    return {
        "api_name": API_NAME,
        "version": API_VERSION,
        "environment": ENVIRONMENT,
        "endpoints": {
            "catalog": "GET /api/products, /api/categories, /api/banners, /api/testimonials",
            "cart": "GET|POST|PUT|DELETE /api/cart",
            "checkout": "POST /api/checkout, POST /api/checkout/quote",
            "orders": "GET /api/orders, GET /api/orders/{order_id}",
            "promo_codes": "POST /api/promo-codes/validate",
            "videos": "GET /api/videos, /api/video-players, POST /api/video-requests",
            "auctions": "GET /api/auctions, POST /api/auctions/{auction_id}/bids",
            "profile": "GET|PUT /api/profile, /api/profile/wishlist",
            "contact": "POST /api/contact",
            "admin": "/api/admin/* (products, orders, customers, admins, promo-codes, banners, "
                     "videos, video-requests, auctions, testimonials, settings, dashboard, seed, diagnostics)",
        },
    }


# Middleware for request logging (development only)
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log requests in development mode"""
    if DEBUG:
        start_time = datetime.now()
        logger.info(f"Request: {request.method} {request.url}")

        response = await call_next(request)

        process_time = datetime.now() - start_time
        logger.info(f"Response: {response.status_code} in {process_time.total_seconds():.3f}s")

        return response
    else:
        return await call_next(request)


# Run the application
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server in {ENVIRONMENT} mode on port {PORT}")

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=PORT,
        reload=DEBUG,
        log_level=LOG_LEVEL.lower(),
        access_log=DEBUG
    )
