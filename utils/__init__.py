"""
Utility modules for the delinquency scoring engine.
"""

from .formatting import format_currency, format_percent, format_ratio
from .config import Config

__all__ = ["format_currency", "format_percent", "format_ratio", "Config"]
