"""
FastAPI routers grouped by feature.
"""
