"""Storefront: product catalog, reviews and orders API."""

__version__ = "0.1.0"
