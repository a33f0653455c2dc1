"""
Static configuration for Guildhall, loaded from the environment (.env
supported).
"""

from guildhall.core.config.config import Config, Environment

__all__ = ["Config", "Environment"]
