"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with a local SQLite file and console logging.  In a
production deployment you should override these via environment
variables or a dedicated configuration service.
"""

import os
from dataclasses import dataclass
from typing import FrozenSet


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Address Book API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Versioned prefix under which the routers are mounted.
    api_prefix: str = os.getenv("API_PREFIX", "/api/v1")

    # Comma‑separated role names that grant the admin capability.  Roles
    # arrive in the ``X-User-Roles`` header set by the upstream gateway.
    admin_roles: str = os.getenv("ADMIN_ROLES", "admin,super_admin")

    # Deleted addresses are kept with ``deleted = 1`` unless this is set,
    # in which case the row is physically removed.
    hard_delete: bool = os.getenv("ADDRESS_HARD_DELETE", "false").lower() in {"1", "true", "yes"}

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "address_book.db")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    @property
    def admin_role_set(self) -> FrozenSet[str]:
        return frozenset(r.strip().lower() for r in self.admin_roles.split(",") if r.strip())


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class creation time, environment variables should
# be set before importing this module.
settings = Settings()
