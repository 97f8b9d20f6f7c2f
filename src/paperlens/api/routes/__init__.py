"""API Routes"""

from . import papers, users

__all__ = ["papers", "users"]
