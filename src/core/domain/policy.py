"""Unknown-tag policy for the decoder.

This module centralizes what the decoder does with a tag that has no
registered reader. Keeping it in the domain layer lets the settings, the
codec and the CLI share a single source of truth without circular imports.
"""

from __future__ import annotations

from enum import Enum


class UnknownTagPolicy(str, Enum):
    """Supported behaviours for tags without a reader function."""

    ERROR = "error"
    PRESERVE = "preserve"

    @classmethod
    def default(cls) -> "UnknownTagPolicy":
        """Return the policy used when nothing is configured."""

        return cls.ERROR

    @classmethod
    def from_bool(cls, preserve: bool) -> "UnknownTagPolicy":
        """Derive a policy value from a CLI boolean flag."""

        return cls.PRESERVE if preserve else cls.ERROR

    def label(self) -> str:
        """Human readable label for tables and logging."""

        if self is UnknownTagPolicy.PRESERVE:
            return "preserve as TaggedLiteral"
        return "raise UnknownTagError"
