"""Snapshot parsing and validation."""

from propcheck.normalization.schema import REQUIRED_FIELDS, SchemaValidationError, validate_table
from propcheck.normalization.snapshot import (
    game_log_from_dict,
    normalize_stat_key,
    snapshot_from_dict,
    validate_line,
    validate_stat,
)

__all__ = [
    "REQUIRED_FIELDS",
    "SchemaValidationError",
    "game_log_from_dict",
    "normalize_stat_key",
    "snapshot_from_dict",
    "validate_line",
    "validate_stat",
    "validate_table",
]
