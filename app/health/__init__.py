"""Campus Lost & Found health endpoints"""

from .router import router

__all__ = ["router"]
