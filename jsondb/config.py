"""
Configuration for jsondb.

Uses pydantic-settings for environment variable loading. Every setting can
be overridden with a JSONDB_-prefixed environment variable, e.g.
JSONDB_LOG_LEVEL=DEBUG or JSONDB_FSYNC=false.

Invariants:
    - All settings have defaults suitable for interactive local use
    - Only the entry point reads Settings; the storage layer takes plain
      keyword arguments
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """jsondb configuration loaded from environment."""

    # Logging
    log_level: str = Field(default="WARNING", description="Root log level")
    log_format: Literal["text", "json"] = Field(default="text", description="Log output format")

    # Storage
    fsync: bool = Field(
        default=True, description="Force collection writes to stable storage before rename"
    )
    indent: Optional[int] = Field(default=2, ge=0, description="Collection file JSON indent")

    # Shell
    prompt: str = Field(default="> ", description="Prompt shown when no database is loaded")
    database: Optional[str] = Field(
        default=None, description="Database directory to load at start-up"
    )

    model_config = {"env_prefix": "JSONDB_"}

    def store_options(self) -> dict:
        """Keyword arguments for Database/CollectionStore."""
        return {"fsync": self.fsync, "indent": self.indent}
