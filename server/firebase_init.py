import firebase_admin
from firebase_admin import credentials, firestore, storage
import logging
import os

from config import (
    STORE_BACKEND, SERVICE_ACCOUNT_PATH, FIREBASE_PROJECT_ID, FIREBASE_STORAGE_BUCKET,
    LOCAL_STORE_PATH, FALLBACK_STORE_PATH
)
from local_store import LocalFirestore

logger = logging.getLogger(__name__)

db = None
bucket = None
firestore_available = False


def _initialize_firebase():
    """Initialize the Firebase Admin SDK once and return the Firestore client and bucket"""
    options = {
        'projectId': FIREBASE_PROJECT_ID,
        'storageBucket': FIREBASE_STORAGE_BUCKET
    }

    try:
        app = firebase_admin.get_app()
    except ValueError:
        if os.path.exists(SERVICE_ACCOUNT_PATH):
            cred = credentials.Certificate(SERVICE_ACCOUNT_PATH)
            app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase initialized with service account key")
        else:
            # Works on Cloud Run / with GOOGLE_APPLICATION_CREDENTIALS set
            app = firebase_admin.initialize_app(credentials.ApplicationDefault(), options)
            logger.info("Firebase initialized with application default credentials")

    return firestore.client(app), storage.bucket(app=app)


if STORE_BACKEND == 'memory':
    db = LocalFirestore()
    fallback_db = LocalFirestore()
    logger.info("Using in-memory document store")
elif STORE_BACKEND == 'local':
    db = LocalFirestore(LOCAL_STORE_PATH)
    fallback_db = LocalFirestore(FALLBACK_STORE_PATH)
    logger.info(f"Using local document store at {LOCAL_STORE_PATH}")
else:
    fallback_db = LocalFirestore(FALLBACK_STORE_PATH)
    try:
        db, bucket = _initialize_firebase()
        firestore_available = True
        logger.info("Firebase initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        logger.info("Running in local mode - data is kept in the local document store")
        db = LocalFirestore(LOCAL_STORE_PATH)

# Export the database instances
__all__ = ['db', 'fallback_db', 'bucket', 'firestore_available']
