"""
Resource limits for address parsing.

Limits are immutable and passed explicitly to the parse/decode entry
points; there is no module-level mutable configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Limits:
    """
    Bounds applied to untrusted text and binary addresses.

    All parameters are immutable and hashable.
    """

    # ==========================================================================
    # Structure
    # ==========================================================================

    max_segments: int = 128
    """Maximum number of protocol segments in one address. Bounds recursion."""

    # ==========================================================================
    # Input size
    # ==========================================================================

    max_text_length: int = 8192
    """Longest accepted text address, in characters."""

    max_binary_length: int = 8192
    """Longest accepted binary address, in bytes."""

    def __post_init__(self):
        if self.max_segments < 1:
            raise ValueError("max_segments must be >= 1")
        if self.max_text_length < 1 or self.max_binary_length < 1:
            raise ValueError("length limits must be >= 1")


DEFAULT_LIMITS = Limits()
