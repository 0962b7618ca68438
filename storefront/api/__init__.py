"""
Storefront API
FastAPI application package.
"""
