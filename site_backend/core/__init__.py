"""
Core utilities shared across the site backend.

This package hosts configuration helpers, logging setup, the error taxonomy
and password hashing. Services and routers depend on these primitives instead
of reading os.environ or configuring handlers themselves.
"""
