"""
Service container wiring the domain services together.
"""

from .container import ServiceContainer

__all__ = ["ServiceContainer"]
