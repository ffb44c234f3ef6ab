"""
Error Handling for Legendary Signatures API

Storefront exception types, the mapping from each to an HTTP status, and the
exception handlers registered on the FastAPI app. Every store error is
returned as {"error": {"code", "message", "details", "timestamp"}}.
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List
import traceback

from config import DEBUG

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base exception class for storefront errors"""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code or "GENERAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(StoreError):
    """Raised when input is well-formed but not acceptable to the store"""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = str(value)
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(StoreError):
    """Raised when a document does not exist"""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource.capitalize()} with ID '{resource_id}' not found",
            f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            {"resource": resource, "id": resource_id}
        )


class InvalidStatusTransitionError(StoreError):
    """Raised when a status field is moved to a state it cannot reach"""

    def __init__(self, resource: str, current_status: str, new_status: str, allowed: List[str] = None):
        self.current_status = current_status
        self.new_status = new_status
        message = f"Cannot move {resource} from '{current_status}' to '{new_status}'"
        super().__init__(
            message,
            "INVALID_STATUS_TRANSITION",
            {
                "resource": resource,
                "current_status": current_status,
                "new_status": new_status,
                "allowed": allowed or []
            }
        )


class ProductUnavailableError(StoreError):
    """Raised when a product cannot be purchased"""

    def __init__(self, product_id: str, reason: str = "not available"):
        self.product_id = product_id
        super().__init__(
            f"Product '{product_id}' is {reason}",
            "PRODUCT_UNAVAILABLE",
            {"product_id": product_id, "reason": reason}
        )


class PromoCodeError(StoreError):
    """Raised when a promo code cannot be created, updated or applied"""

    def __init__(self, message: str, code: str = None):
        self.code = code
        details = {'code': code} if code else {}
        super().__init__(message, "PROMO_CODE_ERROR", details)


class DuplicateError(StoreError):
    """Raised when a unique field already exists"""

    def __init__(self, message: str, field: str = None, value: Any = None):
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = str(value)
        super().__init__(message, "DUPLICATE", details)


class PaymentError(StoreError):
    """Raised when the card payment is declined or cannot be created"""

    def __init__(self, message: str, payment_provider_error: str = None):
        self.payment_provider_error = payment_provider_error
        details = {}
        if payment_provider_error:
            details['provider_error'] = payment_provider_error
        super().__init__(message, "PAYMENT_ERROR", details)


class DatabaseError(StoreError):
    """Raised when Firestore (or the local store) fails a read or write"""

    def __init__(self, message: str, operation: str = None, collection: str = None):
        self.operation = operation
        self.collection = collection
        details = {}
        if operation:
            details['operation'] = operation
        if collection:
            details['collection'] = collection
        super().__init__(message, "DATABASE_ERROR", details)


class StorageUploadError(StoreError):
    """Raised when a media upload is rejected or fails"""

    def __init__(self, message: str, path: str = None):
        self.path = path
        details = {'path': path} if path else {}
        super().__init__(message, "STORAGE_UPLOAD_ERROR", details)


# Checked in order; the first matching class decides the status code
STATUS_CODES = (
    (HTTPException, None),
    ((ValidationError, PromoCodeError, StorageUploadError), status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    ((ProductUnavailableError, InvalidStatusTransitionError, DuplicateError), status.HTTP_409_CONFLICT),
    (PaymentError, status.HTTP_402_PAYMENT_REQUIRED),
    (DatabaseError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


class ErrorHandler:
    """Logging and response formatting shared by the exception handlers"""

    @staticmethod
    def log_error(error: Exception, context: Dict[str, Any] = None):
        """
        Log a failed request

        Store errors are expected outcomes (bad input, missing documents,
        declined cards) and log as warnings. Anything else logs as an error,
        with the traceback when running in development.
        """
        error_info = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'context': context or {}
        }

        if isinstance(error, StoreError):
            error_info['error_code'] = error.error_code
            error_info['details'] = error.details
            logger.warning(f"Request failed: {error_info}")
            return error_info

        if DEBUG:
            error_info['stack_trace'] = traceback.format_exc()
        logger.error(f"Unhandled error: {error_info}")
        return error_info

    @staticmethod
    def format_error_response(error: Exception) -> Dict[str, Any]:
        """Body of an error response: {"error": {code, message, ...}}"""
        body = {"timestamp": datetime.now(timezone.utc).isoformat()}

        if isinstance(error, StoreError):
            body.update(code=error.error_code, message=error.message, details=error.details)
        elif isinstance(error, HTTPException):
            body.update(code="HTTP_ERROR", message=error.detail, status_code=error.status_code)
        else:
            body.update(code="INTERNAL_ERROR", message="An internal error occurred")

        return {"error": body}

    @staticmethod
    def get_http_status_code(error: Exception) -> int:
        for error_types, status_code in STATUS_CODES:
            if isinstance(error, error_types):
                return status_code if status_code is not None else error.status_code
        return status.HTTP_500_INTERNAL_SERVER_ERROR


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Handler for the storefront's own exceptions"""
    ErrorHandler.log_error(exc, {"method": request.method, "url": str(request.url)})
    return JSONResponse(
        status_code=ErrorHandler.get_http_status_code(exc),
        content=ErrorHandler.format_error_response(exc)
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: anything not caught by a route becomes a 500"""

    context = {
        "method": request.method,
        "url": str(request.url),
        "user_agent": request.headers.get("user-agent", "unknown")
    }

    ErrorHandler.log_error(exc, context)

    return JSONResponse(
        status_code=ErrorHandler.get_http_status_code(exc),
        content=ErrorHandler.format_error_response(exc)
    )


def internal_error(action: str, error: Exception) -> HTTPException:
    """Log an unexpected failure and build the 500 response for it"""
    logger.error(f"Error {action}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed {action}: {str(error)}"
    )


class DatabaseOperationContext:
    """
    Times a store operation and turns driver exceptions into DatabaseError

    Store and HTTP exceptions raised inside the block pass through unchanged.
    """

    def __init__(self, operation: str, collection: str = None):
        self.operation = operation
        self.collection = collection
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        logger.debug(f"Starting database operation: {self.operation} on {self.collection}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = datetime.now() - self.start_time

        if exc_type is None:
            logger.debug(f"Database operation completed: {self.operation} on {self.collection} in {duration.total_seconds():.3f}s")
            return False

        logger.error(f"Database operation failed: {self.operation} on {self.collection} after {duration.total_seconds():.3f}s: {exc_val}")

        if not issubclass(exc_type, (StoreError, HTTPException)):
            raise DatabaseError(
                f"Database operation failed: {str(exc_val)}",
                self.operation,
                self.collection
            ) from exc_val

        return False


class ResponseHelpers:
    """Shapes shared by list endpoints"""

    @staticmethod
    def paginated_response(items: List[Any], total: int, page: int, per_page: int) -> Dict[str, Any]:
        """One page of results with its pagination block"""
        total_pages = (total + per_page - 1) // per_page

        return {
            "success": True,
            "data": items,
            "pagination": {
                "total": total,
                "page": page,
                "per_page": per_page,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1
            },
            "timestamp": datetime.now(timezone.utc).isoformat()
        }


def paginate(items: List[Any], page: int, per_page: int) -> Dict[str, Any]:
    """Slice a full result list into one page"""
    start = (page - 1) * per_page
    return ResponseHelpers.paginated_response(items[start:start + per_page], len(items), page, per_page)
