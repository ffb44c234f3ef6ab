"""
Promo Code Services

Creation, uniqueness checks and checkout-time validation of promo codes.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Dict, Optional

from database import DatabaseService, PromoCodeService
from error_handling import DuplicateError, NotFoundError, PromoCodeError
from utils import generate_random_code, round_money, to_datetime

logger = logging.getLogger(__name__)

# Attempts at finding an unused random code before giving up
MAX_CODE_ATTEMPTS = 10


def _format_amount(value: float) -> str:
    """100.0 -> "100", 99.5 -> "99.5" """
    return f"{value:g}"


def invalid(message: str) -> Dict[str, Any]:
    return {"valid": False, "discount": 0.0, "promoCodeId": None, "message": message}


def calculate_discount(promo_code: Dict[str, Any], order_total: float) -> float:
    """
    Discount a promo code gives on an order total

    Percentage discounts are capped at maxDiscount when one is set; fixed
    discounts never exceed the order total.
    """
    discount_value = float(promo_code.get('discountValue') or 0)
    if promo_code.get('discountType') == 'percentage':
        discount = order_total * discount_value / 100
        max_discount = promo_code.get('maxDiscount')
        if max_discount and discount > max_discount:
            discount = float(max_discount)
    else:
        discount = min(discount_value, order_total)
    return round_money(discount)


def validate_promo_code(code: str, order_total: float, now: datetime = None) -> Dict[str, Any]:
    """
    Check whether a promo code can be applied to an order total

    Args:
        code: Code as typed by the customer
        order_total: Order subtotal the discount applies to
        now: Evaluation time, defaults to the current time

    Returns:
        dict: {valid, discount, promoCodeId, message}
    """
    try:
        promo_code = PromoCodeService.find_by_code(code.strip().upper(), active_only=True)
        if not promo_code:
            return invalid("Invalid promo code")

        now = now or datetime.now(timezone.utc)
        start_date = to_datetime(promo_code.get('startDate'))
        end_date = to_datetime(promo_code.get('endDate'))
        if (start_date and now < start_date) or (end_date and now > end_date):
            return invalid("Promo code has expired")

        usage_limit = promo_code.get('usageLimit')
        if usage_limit and promo_code.get('usageCount', 0) >= usage_limit:
            return invalid("Promo code has reached its usage limit")

        min_order_value = promo_code.get('minOrderValue')
        if min_order_value and order_total < min_order_value:
            return invalid(f"Order total must be at least ${_format_amount(min_order_value)} to use this code")

        return {
            "valid": True,
            "discount": calculate_discount(promo_code, order_total),
            "promoCodeId": promo_code['id'],
            "message": "Promo code applied successfully",
        }
    except Exception as e:
        logger.error(f"Error validating promo code: {e}")
        return invalid("Error validating promo code")


def generate_unique_code() -> str:
    """Random 6-digit code no existing promo code uses"""
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_random_code(6, True)
        if not PromoCodeService.find_by_code(code):
            return code
    raise PromoCodeError("Could not generate an unused promo code")


def _ensure_code_unused(code: str, promo_id: Optional[str] = None):
    existing = PromoCodeService.find_by_code(code)
    if existing and existing['id'] != promo_id:
        raise DuplicateError(f"Promo code '{code}' already exists", 'code', code)


def create_promo_code(promo_data: Dict[str, Any], created_by: str) -> Dict[str, Any]:
    """Store a new promo code, generating the code when none is given"""
    if promo_data.get('code'):
        promo_data['code'] = promo_data['code'].upper()
        _ensure_code_unused(promo_data['code'])
    else:
        promo_data['code'] = generate_unique_code()

    now = datetime.now(timezone.utc)
    promo_data.update({
        'usageCount': 0,
        'createdBy': created_by,
        'createdAt': now,
        'updatedAt': now,
    })
    promo_id = DatabaseService.add_document('promoCodes', promo_data)
    logger.info(f"Promo code {promo_data['code']} created by {created_by}")
    return {**promo_data, 'id': promo_id}


def update_promo_code(promo_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a partial update, keeping codes unique and date windows valid"""
    current = PromoCodeService.get_promo_code(promo_id)
    if not current:
        raise NotFoundError('promo code', promo_id)

    if updates.get('code'):
        updates['code'] = updates['code'].upper()
        _ensure_code_unused(updates['code'], promo_id)

    merged = {**current, **updates}
    if merged.get('discountType') == 'percentage' and float(merged.get('discountValue') or 0) > 100:
        raise PromoCodeError("Percentage discount cannot exceed 100", merged.get('code'))
    start_date = to_datetime(merged.get('startDate'))
    end_date = to_datetime(merged.get('endDate'))
    if start_date and end_date and end_date <= start_date:
        raise PromoCodeError("endDate must be after startDate", merged.get('code'))

    updates['updatedAt'] = datetime.now(timezone.utc)
    DatabaseService.update_document('promoCodes', promo_id, updates, 'promo code')
    return {**current, **updates}
