"""
Services Package for Legendary Signatures API

Business workflows layered over the database services: checkout pricing,
promo codes, order and video request status changes, and dashboard figures.
"""
