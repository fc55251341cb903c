"""Output formatters."""

from tdeelab.export.formatters import JSONFormatter, TableFormatter

__all__ = ["TableFormatter", "JSONFormatter"]
