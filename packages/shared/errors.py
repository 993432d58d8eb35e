"""
Hard failures of the intake pipeline.

Soft conditions (no name match, no DOB match, out-of-range DOB) are never
raised; they travel as ``ExtractionWarning`` entries on the identity.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from packages.shared.models import ChainTriggerResult, ExtractedIdentity


class IntakeError(Exception):
    """Base class for intake pipeline errors."""


class IncompleteIdentityError(IntakeError):
    """Required identity fields are still absent after resolution."""

    def __init__(self, missing_fields: list[str], identity: "ExtractedIdentity | None" = None):
        self.missing_fields = list(missing_fields)
        self.identity = identity
        super().__init__(
            "Cannot proceed without complete patient information; missing: "
            + ", ".join(self.missing_fields)
        )


class ChainTriggerError(IntakeError):
    """The chain automation webhook reported a failure."""

    def __init__(self, result: "ChainTriggerResult", identity: "ExtractedIdentity | None" = None):
        self.result = result
        self.identity = identity
        super().__init__(result.error or "Failed to trigger chain")
