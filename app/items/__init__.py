"""Campus Lost & Found item endpoints"""

from .router import router

__all__ = ["router"]
