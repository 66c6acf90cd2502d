"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
catalog can start without any configuration at all.  In a production
deployment you should override these via environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Bookcom Catalog")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file.  When empty only the console handler
    # is attached.
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database.  A relative path is resolved relative
    # to the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "bookcom.db")

    # Capacities of the per-entity caches.  Each cache is sized
    # independently; the observed deployment keeps three hot records
    # of every kind.
    book_cache_size: int = int(os.getenv("BOOK_CACHE_SIZE", "3"))
    user_cache_size: int = int(os.getenv("USER_CACHE_SIZE", "3"))
    comment_cache_size: int = int(os.getenv("COMMENT_CACHE_SIZE", "3"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
