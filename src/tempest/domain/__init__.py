"""
Domain entities mapped onto the platform database.
"""

from .entities import ContentRecord

__all__ = ["ContentRecord"]
