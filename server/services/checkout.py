"""
Checkout Services

Prices a cart from the product documents, applies promo codes, takes the
card payment through Stripe and writes the order.
"""

import logging
from typing import Any, Dict, List, Optional

import stripe

from config import CURRENCY, DELIVERY_FEE, FREE_SHIPPING_THRESHOLD, STRIPE_SECRET_KEY, TAX_RATE
from database import DatabaseService, OrderService, ProductService, PromoCodeService
from error_handling import NotFoundError, PaymentError, ProductUnavailableError, PromoCodeError
from services.promotions import validate_promo_code
from utils import history_entry, round_money

logger = logging.getLogger(__name__)

# Configure Stripe
stripe.api_key = STRIPE_SECRET_KEY

PAYMENT_METHOD_LABELS = {
    'credit-card': 'Credit Card',
    'cash-on-delivery': 'Cash on Delivery',
}


def shipping_for(subtotal: float) -> float:
    """Delivery is free from FREE_SHIPPING_THRESHOLD upwards"""
    return 0.0 if subtotal >= FREE_SHIPPING_THRESHOLD else DELIVERY_FEE


def price_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Resolve cart lines against the product catalog

    Args:
        items: [{productId, quantity}]

    Returns:
        list: Order lines with product name, unit price and image

    Raises:
        NotFoundError: If a product does not exist
        ProductUnavailableError: If a product is unavailable or short on stock
    """
    lines = []
    for item in items:
        product_id = item['productId']
        quantity = int(item.get('quantity', 1))
        product = ProductService.get_product(product_id)
        if not product:
            raise NotFoundError('product', product_id)
        if not product.get('available', True):
            raise ProductUnavailableError(product_id)
        stock = product.get('stock')
        if stock is not None and stock < quantity:
            raise ProductUnavailableError(product_id, f"short on stock ({stock} left)")

        lines.append({
            'productId': product_id,
            'productName': product.get('title', ''),
            'signedBy': product.get('signedBy', ''),
            'quantity': quantity,
            'price': round_money(product.get('price', 0)),
            'imageUrl': product.get('imageUrl', ''),
            'categoryId': product.get('categoryId'),
        })
    return lines


def calculate_totals(lines: List[Dict[str, Any]], promo_code: Optional[str] = None) -> Dict[str, Any]:
    """
    Price breakdown of a set of order lines

    shipping is decided on the subtotal before discount; tax applies to the
    discounted subtotal.

    Returns:
        dict: subtotal, discount, shipping, tax, total and the promo validation result
    """
    subtotal = round_money(sum(line['price'] * line['quantity'] for line in lines))
    promo = None
    discount = 0.0
    if promo_code:
        promo = validate_promo_code(promo_code, subtotal)
        if promo['valid']:
            discount = promo['discount']

    shipping = shipping_for(subtotal)
    tax = round_money((subtotal - discount) * TAX_RATE)
    total = round_money(subtotal - discount + shipping + tax)
    return {
        'subtotal': subtotal,
        'discount': round_money(discount),
        'shipping': shipping,
        'tax': tax,
        'total': total,
        'promo': promo,
    }


def quote(items: List[Dict[str, Any]], promo_code: Optional[str] = None) -> Dict[str, Any]:
    """Price a cart without placing an order"""
    lines = price_items(items)
    return {'items': lines, **calculate_totals(lines, promo_code)}


def charge_card(amount: float, payment_method_id: str, metadata: Dict[str, Any]) -> str:
    """
    Create and confirm a Stripe PaymentIntent

    Returns:
        str: PaymentIntent ID

    Raises:
        PaymentError: If Stripe declines or the payment needs further action
    """
    try:
        payment_intent = stripe.PaymentIntent.create(
            amount=int(round(amount * 100)),  # Stripe expects the minor unit
            currency=CURRENCY,
            payment_method=payment_method_id,
            confirm=True,
            automatic_payment_methods={'enabled': True, 'allow_redirects': 'never'},
            metadata=metadata,
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error: {e}")
        raise PaymentError("Payment processing failed", str(e)) from e

    if payment_intent.status != 'succeeded':
        logger.warning(f"PaymentIntent {payment_intent.id} ended in status {payment_intent.status}")
        raise PaymentError(f"Payment was not completed (status: {payment_intent.status})")

    logger.info(f"Payment {payment_intent.id} succeeded for {amount} {CURRENCY}")
    return payment_intent.id


def _after_order(user_uid: Optional[str], lines: List[Dict[str, Any]], promo_code_id: Optional[str]):
    """Bookkeeping once an order is stored; failures here never undo the order"""
    for line in lines:
        try:
            ProductService.record_sale(line['productId'], line['quantity'])
        except Exception as e:
            logger.error(f"Could not record sale of product {line['productId']}: {e}")

    if promo_code_id:
        try:
            PromoCodeService.record_usage(promo_code_id)
        except Exception as e:
            logger.error(f"Could not record usage of promo code {promo_code_id}: {e}")

    if user_uid:
        try:
            DatabaseService.delete_document('carts', user_uid)
        except Exception as e:
            logger.error(f"Could not clear cart for user {user_uid}: {e}")


def place_order(user_data: Dict[str, Any], checkout: Dict[str, Any]) -> Dict[str, Any]:
    """
    Place a product order

    Args:
        user_data: Authenticated user from the token
        checkout: CheckoutRequest as a dict

    Returns:
        dict: order_id, numeric_order_id, stored_in and the price breakdown

    Raises:
        NotFoundError, ProductUnavailableError: For unknown or unavailable products
        PromoCodeError: If a promo code was given but cannot be applied
        PaymentError: If the card payment fails
    """
    user_uid = user_data.get('uid')
    customer = checkout['customer']
    lines = price_items(checkout['items'])
    totals = calculate_totals(lines, checkout.get('promoCode'))

    promo = totals.pop('promo')
    if promo is not None and not promo['valid']:
        raise PromoCodeError(promo['message'], checkout.get('promoCode'))

    payment_method = checkout.get('paymentMethod', 'credit-card')
    payment_intent_id = None
    if payment_method == 'credit-card':
        if checkout.get('paymentMethodId'):
            payment_intent_id = charge_card(totals['total'], checkout['paymentMethodId'], {
                'customer_email': customer['email'],
                'user_id': user_uid or '',
                'items_count': len(lines),
            })
        payment_status = 'paid'
    else:
        payment_status = 'pending'

    numeric_order_id = OrderService.next_numeric_order_id()
    order_data = {
        'numericOrderId': numeric_order_id,
        'userId': user_uid,
        'customerInfo': {
            'name': f"{customer['firstName']} {customer.get('lastName', '')}".strip(),
            'email': customer['email'],
            'phone': customer['phone'],
            'address': {
                'line1': customer['address'],
                'city': customer.get('city'),
                'postalCode': customer.get('zipCode', ''),
                'country': customer.get('country'),
            },
        },
        'items': lines,
        **totals,
        'promoCodeId': promo['promoCodeId'] if promo else None,
        'promoCode': checkout.get('promoCode'),
        'paymentMethod': PAYMENT_METHOD_LABELS[payment_method],
        'paymentStatus': payment_status,
        'paymentIntentId': payment_intent_id,
        'orderStatus': 'pending',
        'shippingMethod': 'Standard',
        'notes': checkout.get('notes') or '',
        'history': [history_entry('pending', 'Order placed successfully')],
    }
    order_id, stored_in = OrderService.create_product_order(order_data)

    if stored_in == 'none':
        logger.critical(f"Order {order_id} for user {user_uid} was not stored; payment {payment_intent_id}")
    _after_order(user_uid, lines, order_data['promoCodeId'])

    logger.info(f"Order {order_id} placed by {user_uid} for {totals['total']}")
    return {
        'order_id': order_id,
        'numeric_order_id': numeric_order_id,
        'stored_in': stored_in,
        'payment_status': payment_status,
        **totals,
    }
