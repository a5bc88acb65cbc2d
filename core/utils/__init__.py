"""
Core Utilities Package

This package contains utility functions and helpers used throughout the application.

Modules:
    - time: UTC clock and timestamp formatting
"""

from core.utils.time import current_utc_datetime, format_utc

__all__ = ["current_utc_datetime", "format_utc"]
