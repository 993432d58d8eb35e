from .domain import (
    IDENTITY_FIELDS,
    ChainTriggerResult,
    DictationOutcome,
    ExtractedIdentity,
    ExtractionWarning,
    IdentityPatch,
)
from .enums import AutomationStatus, ChainName, EntryPath, ExtractionState

__all__ = [
    "IDENTITY_FIELDS",
    "AutomationStatus",
    "ChainName",
    "ChainTriggerResult",
    "DictationOutcome",
    "EntryPath",
    "ExtractedIdentity",
    "ExtractionState",
    "ExtractionWarning",
    "IdentityPatch",
]
