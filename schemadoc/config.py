"""
Configuration for schemadoc.

Settings come from environment variables prefixed with ``SCHEMADOC_`` or are
passed explicitly when a documentation session is created.

Invariants:
    - All settings have defaults usable for local development
    - Settings are immutable once a session has been built from them

How to change safely:
    - Add new settings with defaults that keep current behavior
"""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings

# Modules whose classes are never expanded and where ancestor climbing stops.
DEFAULT_PLATFORM_MODULES = [
    "builtins",
    "typing",
    "abc",
    "collections",
    "dataclasses",
    "enum",
    "datetime",
    "decimal",
    "types",
    "uuid",
    "pydantic",
    "pydantic_core",
]


class Settings(BaseSettings):
    """schemadoc configuration."""

    # Domain namespace: only classes from these packages are expanded
    base_packages: list[str] = Field(default_factory=list)
    platform_modules: list[str] = Field(default_factory=lambda: list(DEFAULT_PLATFORM_MODULES))

    skip_private_fields: bool = Field(
        default=True, description="Ignore attributes whose name starts with an underscore"
    )

    # Worker threads for document_types()
    max_workers: int = Field(default=4, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="text or json")

    model_config = {"env_prefix": "SCHEMADOC_", "frozen": True}


def setup_logging(settings: Settings) -> None:
    """Configure root logging from settings.

    Only the CLI calls this; library code never touches the root logger.

    Args:
        settings: Settings providing level and format
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter = logging.Formatter(
            '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
        )
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
