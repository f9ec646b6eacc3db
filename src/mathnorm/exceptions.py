"""
Exceptions for mathnorm.
"""

from typing import Optional, Dict, Any


class MathNormError(Exception):
    """Base exception for mathnorm."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(MathNormError):
    """Configuration value could not be read or applied."""
    pass


class PlaceholderMismatchError(MathNormError):
    """A placeholder was not found exactly once during restoration."""

    def __init__(self, placeholder: str, count: int):
        self.placeholder = placeholder
        self.count = count
        super().__init__(
            f"Placeholder {placeholder!r} found {count} times, expected 1",
            details={"placeholder": placeholder, "count": count},
        )
