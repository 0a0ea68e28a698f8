"""CRM record management: find-or-create, link, upsert and delete patterns."""

from __future__ import annotations

__version__ = "0.1.0"
