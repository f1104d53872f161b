"""Version 1 API routers."""

from . import sessions, similarity

__all__ = ["sessions", "similarity"]
