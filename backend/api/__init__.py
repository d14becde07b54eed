"""
API routes module.

FastAPI application, routers and dependency providers for all HTTP endpoints.
"""
