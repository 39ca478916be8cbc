"""
Program guide query surface.
"""

from .service import EpgService

__all__ = ["EpgService"]
