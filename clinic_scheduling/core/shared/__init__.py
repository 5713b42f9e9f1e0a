"""Shared utilities used across the application."""

from clinic_scheduling.core.shared.logger import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]
