"""Configuration error definitions."""

from __future__ import annotations

from crmrecords.domain.errors import CrmRecordsError


class ConfigurationError(CrmRecordsError, RuntimeError):
    """Raised when configuration values are invalid."""
