from typing import Optional

from pydantic import BaseModel, Field, computed_field

from packages.shared.utils.source_id import derive_key

from .enums import ExtractionState

IDENTITY_FIELDS: tuple[str, ...] = ("first_name", "last_name", "date_of_birth")


class ExtractionWarning(BaseModel):
    code: str
    message: str


class IdentityPatch(BaseModel):
    """Values a resolver supplies for fields extraction could not fill."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None


class ExtractedIdentity(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None  # MM/DD/YYYY
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    name_rule: Optional[str] = None
    dob_rule: Optional[str] = None
    warnings: list[ExtractionWarning] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def canonical_key(self) -> Optional[str]:
        """Source ID; only present once all three identity fields are."""
        if self.first_name and self.last_name and self.date_of_birth:
            return derive_key(self.last_name, self.first_name, self.date_of_birth)
        return None

    @property
    def missing_fields(self) -> list[str]:
        return [name for name in IDENTITY_FIELDS if not getattr(self, name)]

    @property
    def state(self) -> ExtractionState:
        missing = self.missing_fields
        if not missing:
            return ExtractionState.COMPLETE
        if len(missing) == len(IDENTITY_FIELDS):
            return ExtractionState.EMPTY
        return ExtractionState.PARTIALLY_EXTRACTED


class ChainTriggerResult(BaseModel):
    success: bool
    chain_run_id: Optional[str] = None
    message: Optional[str] = None
    view_url: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None


class DictationOutcome(BaseModel):
    identity: ExtractedIdentity
    result: Optional[ChainTriggerResult] = None
