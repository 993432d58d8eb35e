"""
API route: Patient identity extraction + source ID
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from apps.intake.resolvers import StaticResolver
from apps.intake.steps.step03_identity import extract_identity, identity_from_fields
from apps.intake.steps.step04_resolve import resolve_incomplete
from packages.shared.errors import IncompleteIdentityError
from packages.shared.models import ExtractedIdentity, ExtractionState, ExtractionWarning

router = APIRouter(prefix="/identity", tags=["identity"])


class ExtractRequest(BaseModel):
    text: str = ""


class ResolveRequest(BaseModel):
    text: str = ""
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: str | None = None


class SourceIdRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=200)
    last_name: str = Field(min_length=1, max_length=200)
    date_of_birth: str = Field(min_length=1, max_length=20)


class IdentityResponse(BaseModel):
    first_name: str | None
    last_name: str | None
    date_of_birth: str | None
    canonical_key: str | None
    confidence: float
    name_rule: str | None
    dob_rule: str | None
    state: ExtractionState
    missing_fields: list[str]
    warnings: list[ExtractionWarning]


class SourceIdResponse(BaseModel):
    source_id: str
    identity: IdentityResponse


def identity_response(identity: ExtractedIdentity) -> IdentityResponse:
    return IdentityResponse(
        **identity.model_dump(),
        state=identity.state,
        missing_fields=identity.missing_fields,
    )


def incomplete_detail(exc: IncompleteIdentityError) -> dict:
    return {
        "message": str(exc),
        "state": ExtractionState.FAILED.value,
        "missing_fields": exc.missing_fields,
    }


@router.post("/extract", response_model=IdentityResponse)
def extract(req: ExtractRequest):
    """Pattern-match name and DOB from free text. Never fails on a miss."""
    return identity_response(extract_identity(req.text))


@router.post("/resolve", response_model=IdentityResponse)
def resolve(req: ResolveRequest):
    """Extract from text, then fill gaps from the posted form fields."""
    identity = extract_identity(req.text)
    resolver = StaticResolver(req.first_name, req.last_name, req.date_of_birth)
    try:
        identity = resolve_incomplete(identity, resolver)
    except IncompleteIdentityError as exc:
        raise HTTPException(status_code=422, detail=incomplete_detail(exc))
    return identity_response(identity)


@router.post("/source-id", response_model=SourceIdResponse)
def source_id(req: SourceIdRequest):
    """Derive the source ID from manually entered fields."""
    identity = identity_from_fields(req.first_name, req.last_name, req.date_of_birth)
    if not identity.canonical_key:
        exc = IncompleteIdentityError(identity.missing_fields, identity)
        raise HTTPException(status_code=422, detail=incomplete_detail(exc))
    return SourceIdResponse(source_id=identity.canonical_key, identity=identity_response(identity))
