"""
Utility Functions for Legendary Signatures API

This module contains common utility functions used throughout the application.
"""

import random
import re
import secrets
import string
import time
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


def _timestamp_suffix() -> str:
    """Last six digits of the current time in milliseconds"""
    return str(int(time.time() * 1000))[-6:]


def generate_order_id(prefix: str = "ORD") -> str:
    """
    Generate an order ID

    Args:
        prefix: "ORD" for product orders, "VID" for video orders

    Returns:
        str: Order ID such as ORD-482913-77
    """
    return f"{prefix}-{_timestamp_suffix()}-{random.randint(0, 999)}"


def generate_offline_order_id(prefix: str = "ORD") -> str:
    """
    Generate the ID handed back when an order could not be stored anywhere

    Returns:
        str: Order ID such as ORD-OFFLINE-1A2B3C4D
    """
    return f"{prefix}-OFFLINE-{str(uuid.uuid4())[:8].upper()}"


def generate_video_request_id() -> str:
    """Generate the ID of the videoRequests document linked to a video order"""
    return f"VIDREQ-{_timestamp_suffix()}"


def generate_random_code(length: int = 6, numeric_only: bool = True) -> str:
    """
    Generate a random promo code

    Args:
        length: Number of characters
        numeric_only: Digits only when True, uppercase letters and digits otherwise

    Returns:
        str: Random code
    """
    alphabet = string.digits if numeric_only else string.ascii_uppercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for safe storage

    Args:
        filename: Original filename

    Returns:
        str: Filename with everything except letters, digits and dots replaced
    """
    return re.sub(r'[^a-zA-Z0-9.]', '_', filename or 'file')


def generate_slug(text: str) -> str:
    """
    Generate URL-friendly slug from text

    Args:
        text: Text to convert to slug

    Returns:
        str: URL-friendly slug
    """
    slug = re.sub(r'[^\w\s-]', '', text.lower())
    slug = re.sub(r'[-\s_]+', '-', slug)
    return slug.strip('-')


def placeholder_image_url(title: str, signed_by: str) -> str:
    """Placeholder image used when a product image upload fails"""
    query = f"{quote(title or 'Product')} signed by {quote(signed_by or 'Player')}"
    return f"/placeholder.svg?height=400&width=400&query={query}"


def round_money(amount: float) -> float:
    """Round a currency amount to two decimals"""
    return round(float(amount), 2)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Convert a stored timestamp to an aware datetime

    Accepts Firestore timestamps (datetime subclasses), ISO strings, and
    epoch seconds or milliseconds.

    Returns:
        datetime or None if the value cannot be interpreted
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value}")
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def safe_float(value: Any, default: float = 0.0) -> float:
    """
    Safely convert value to float

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        float: Converted value or default
    """
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert value to integer

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        int: Converted value or default
    """
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def validate_status_transition(transitions: dict, current_status: str, new_status: str) -> bool:
    """Check a status change against a table of allowed transitions"""
    return new_status in transitions.get(current_status, [])


def history_entry(status: str, comment: str = None, timestamp: datetime = None) -> dict:
    """Build one entry of an order's status history"""
    entry = {
        'status': status,
        'timestamp': timestamp or utc_now()
    }
    if comment:
        entry['comment'] = comment
    return entry
