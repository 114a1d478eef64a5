"""
Service layer.

Routers call into these classes; they never touch the stores or the
filesystem directly.
"""
