"""
Guildhall - guild management service layer.

Domain services live under ``guildhall.modules``; infrastructure (config,
logging, database, event bus, validation) under ``guildhall.core``.
"""

__version__ = "0.1.0"
