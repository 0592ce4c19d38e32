"""
HTTP routes and request models for the rummy engine.
"""

from .events import *
from .server import register_error_handlers, router

__all__ = ["router", "register_error_handlers"]
