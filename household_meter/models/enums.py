"""Enum definitions for reading validation."""

from enum import Enum


class ReadingStrictness(str, Enum):
    """How a new reading must relate to the last recorded meter value."""

    STRICT = "strict"  # Delta must be positive
    PERMISSIVE = "permissive"  # An unchanged meter value is accepted
