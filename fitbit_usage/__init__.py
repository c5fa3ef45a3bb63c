"""Fitbit usage analysis: load, join, aggregate and cluster tracker users."""

from fitbit_usage.errors import (
    ConfigurationError,
    FitbitUsageError,
    MissingDataError,
    ParseError,
)

__all__ = [
    "ConfigurationError",
    "FitbitUsageError",
    "MissingDataError",
    "ParseError",
]
