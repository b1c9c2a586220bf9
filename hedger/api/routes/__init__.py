"""
API Routes Package

FastAPI routers for health, market data and account endpoints.
"""
