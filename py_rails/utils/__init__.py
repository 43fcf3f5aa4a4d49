"""
Utility helpers shared across the engine.
"""

from .logging import configure_logging

__all__ = ['configure_logging']
