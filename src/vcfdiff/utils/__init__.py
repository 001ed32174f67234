"""
Utility modules for vcfdiff.

Provides the stderr console, logging setup and step timing.
"""

from .logging import console, phase, setup_logging

__all__ = [
    "console",
    "phase",
    "setup_logging",
]
