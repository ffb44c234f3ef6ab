"""
Configuration for Legendary Signatures API

Environment-driven settings and the store's business constants.
"""

import os

# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
PORT = int(os.getenv("PORT", 8080))
DEBUG = ENVIRONMENT == "development"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

API_VERSION = "1.0.0"
API_NAME = "Legendary Signatures API"

# Firebase
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "legendary-signatures")
FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET", f"{FIREBASE_PROJECT_ID}.appspot.com")
SERVICE_ACCOUNT_PATH = os.getenv(
    "FIREBASE_SERVICE_ACCOUNT",
    os.path.join(os.path.dirname(__file__), 'serviceAccountKey.json')
)

# firestore | local | memory
STORE_BACKEND = os.getenv("STORE_BACKEND", "firestore").lower()
LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", os.path.join(os.path.dirname(__file__), 'local_store.json'))
FALLBACK_STORE_PATH = os.getenv("FALLBACK_STORE_PATH", os.path.join(os.path.dirname(__file__), 'offline_orders.json'))

# Payments
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
CURRENCY = os.getenv("CURRENCY", "aed")

# CORS
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "https://legendary-signatures.web.app",
    "https://legendary-signatures.firebaseapp.com",
]
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", ",".join(DEFAULT_CORS_ORIGINS)).split(",")
    if origin.strip()
]

# Checkout pricing
FREE_SHIPPING_THRESHOLD = 1000.0
DELIVERY_FEE = 50.0
TAX_RATE = 0.05
DEFAULT_CITY = "Dubai"
DEFAULT_COUNTRY = "UAE"

# Listing limits
ORDER_LIST_LIMIT = 50
PRODUCT_LIST_LIMIT = 50
RECENT_ORDERS_COUNT = 5

# Media uploads
MAX_IMAGE_BYTES = 10 * 1024 * 1024
MAX_VIDEO_BYTES = 200 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
ALLOWED_VIDEO_TYPES = {"video/mp4", "video/quicktime", "video/webm"}
