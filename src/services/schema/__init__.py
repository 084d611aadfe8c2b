"""Notion database schema provisioning."""

from .service import run_provision  # noqa: F401
