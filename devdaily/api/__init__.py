"""API layer module.

Contains the JSON API routers, middleware and request/response schemas.
"""
