"""
Custom exceptions for the prop convergence engine.

Thin or missing history never raises: evaluators degrade to neutral
signals and aggregates fall back to zero. These exceptions cover input
validation and snapshot assembly, where continuing would produce a
verdict for the wrong question.

Usage:
    from propcheck.exceptions import SnapshotValidationError

    try:
        snapshot = snapshot_from_dict(payload)
    except SnapshotValidationError as e:
        print(f"Bad snapshot: {e}")
"""


class PropCheckError(Exception):
    """
    Base exception for all propcheck errors.

    All custom exceptions inherit from this, allowing:
        except PropCheckError:
            # Catch any engine error
    """
    pass


# =============================================================================
# INPUT ERRORS
# =============================================================================

class SnapshotValidationError(PropCheckError, ValueError):
    """
    Snapshot is missing a required identifier or carries a malformed value.

    Raised when:
    - The stat name is empty
    - The line is missing, non-numeric or not finite
    - A required section (player, game) is absent
    """

    def __init__(self, field: str, message: str = None):
        self.field = field
        msg = f"Invalid snapshot field '{field}'"
        if message:
            msg += f": {message}"
        super().__init__(msg)


class InvalidModificationError(PropCheckError, ValueError):
    """What-if modification has an unknown kind or an unusable value."""

    def __init__(self, kind: str, message: str = None):
        self.kind = kind
        msg = f"Invalid what-if modification '{kind}'"
        if message:
            msg += f": {message}"
        super().__init__(msg)


# =============================================================================
# ASSEMBLY ERRORS
# =============================================================================

class ProviderError(PropCheckError):
    """
    A required snapshot piece could not be fetched.

    Raised when:
    - Player or game resolution fails
    - Schedule or game log provider raises

    Ranking, injury and extra-context failures are not raised; the
    assembler degrades them to warnings.
    """

    def __init__(self, source: str, message: str = None, original_error: Exception = None):
        self.source = source
        self.original_error = original_error
        msg = f"Error fetching from {source}"
        if message:
            msg += f": {message}"
        if original_error:
            msg += f" (caused by: {type(original_error).__name__}: {original_error})"
        super().__init__(msg)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(PropCheckError):
    """
    Invalid or inconsistent engine configuration.

    Raised when:
    - A window or minimum sample size is not positive
    - Clamp bounds are inverted
    """

    def __init__(self, setting: str, message: str):
        self.setting = setting
        super().__init__(f"Configuration error for '{setting}': {message}")
