"""Personal finance tracker - web client.

The client is glue over the finance REST backend:
- All persistence and AI work happens in the backend.
- The client holds the auth session, guards routes and aggregates for display.

Core concepts:
- The session credential is an opaque cookie owned by the backend.
- The auth store is the single source of truth for "am I logged in, as whom".

See DESIGN.md for the module map.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
