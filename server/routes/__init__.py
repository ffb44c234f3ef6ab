"""
Routes Package for Legendary Signatures API

This package contains all route modules organized by functionality.
"""

from . import (
    products, categories, orders, checkout, promo_codes, banners,
    customers, admins, profile, cart, videos, auctions, content,
    dashboard, admin_tools
)

__all__ = [
    'products', 'categories', 'orders', 'checkout', 'promo_codes', 'banners',
    'customers', 'admins', 'profile', 'cart', 'videos', 'auctions', 'content',
    'dashboard', 'admin_tools'
]
