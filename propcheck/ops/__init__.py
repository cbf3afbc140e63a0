"""Operational helpers."""

from propcheck.ops.logging import configure_logging

__all__ = ["configure_logging"]
