"""Shared configuration for the export and import flows."""

from .config import Config, load_config, validate_config  # noqa: F401
