"""
API route: Chain automation for dictation transcripts
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from apps.api.routes.identity import IdentityResponse, identity_response, incomplete_detail
from apps.intake.chain_trigger import DEFAULT_CHAIN_NAME, ChainTriggerClient
from apps.intake.pipeline import process_dictation
from apps.intake.resolvers import StaticResolver
from packages.db.database import get_db
from packages.db.models import AutomationLog
from packages.shared.errors import ChainTriggerError, IncompleteIdentityError
from packages.shared.models import AutomationStatus, EntryPath

router = APIRouter(prefix="/automation", tags=["automation"])
logger = logging.getLogger(__name__)


def get_chain_client() -> ChainTriggerClient:
    """FastAPI dependency; overridden in tests."""
    return ChainTriggerClient()


class DictationRequest(BaseModel):
    transcript: str = Field(min_length=1)
    chain_name: str = Field(default=DEFAULT_CHAIN_NAME, min_length=1, max_length=200)
    entry_path: EntryPath = EntryPath.AMBIENT_DICTATION
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: str | None = None
    extra_variables: dict[str, Any] = Field(default_factory=dict)


class DictationResponse(BaseModel):
    log_id: str
    success: bool
    chain_run_id: str | None
    message: str | None
    view_url: str | None
    identity: IdentityResponse


class AutomationLogResponse(BaseModel):
    id: str
    chain_name: str
    source_id: str | None
    entry_path: str | None
    status: str
    chain_run_id: str | None
    http_status: int | None
    extraction_confidence: float | None
    error_message: str | None
    created_at: str


def _log_response(row: AutomationLog) -> AutomationLogResponse:
    return AutomationLogResponse(
        id=row.id,
        chain_name=row.chain_name,
        source_id=row.source_id,
        entry_path=row.entry_path,
        status=row.status,
        chain_run_id=row.chain_run_id,
        http_status=row.http_status,
        extraction_confidence=row.extraction_confidence,
        error_message=row.error_message,
        created_at=row.created_at.isoformat(),
    )


@router.post("/dictation", response_model=DictationResponse, status_code=201)
def trigger_dictation(
    req: DictationRequest,
    db: Session = Depends(get_db),
    client: ChainTriggerClient = Depends(get_chain_client),
):
    """
    Extract the patient from the transcript, fill gaps from the posted
    fields, and trigger the chain. The chain is never called for an
    incomplete identity.
    """
    resolver = StaticResolver(req.first_name, req.last_name, req.date_of_birth)
    try:
        outcome = process_dictation(
            req.transcript,
            resolver=resolver,
            client=client,
            chain_name=req.chain_name,
            source=req.entry_path,
            extra_variables=req.extra_variables or None,
        )
    except IncompleteIdentityError as exc:
        raise HTTPException(status_code=422, detail=incomplete_detail(exc))
    except ChainTriggerError as exc:
        identity = exc.identity
        row = AutomationLog(
            chain_name=req.chain_name,
            source_id=identity.canonical_key if identity else None,
            entry_path=req.entry_path.value,
            status=AutomationStatus.ERROR.value,
            http_status=exc.result.status_code,
            extraction_confidence=identity.confidence if identity else None,
            request_json={"chain_to_run": req.chain_name, "extra_variables": req.extra_variables},
            error_message=exc.result.error,
        )
        db.add(row)
        db.flush()
        # returned, not raised: get_db rolls back on exceptions
        return JSONResponse(
            status_code=502,
            content={"detail": {"message": str(exc), "log_id": row.id}},
        )

    identity = outcome.identity
    result = outcome.result
    row = AutomationLog(
        chain_name=req.chain_name,
        source_id=identity.canonical_key,
        entry_path=req.entry_path.value,
        status=AutomationStatus.SUCCESS.value,
        chain_run_id=result.chain_run_id,
        http_status=result.status_code,
        extraction_confidence=identity.confidence,
        request_json={"chain_to_run": req.chain_name, "extra_variables": req.extra_variables},
        response_json=result.model_dump(),
    )
    db.add(row)
    db.flush()
    logger.info("Automation log %s recorded for chain %s", row.id, req.chain_name)
    return DictationResponse(
        log_id=row.id,
        success=result.success,
        chain_run_id=result.chain_run_id,
        message=result.message,
        view_url=result.view_url,
        identity=identity_response(identity),
    )


@router.get("/logs", response_model=list[AutomationLogResponse])
def list_logs(
    source_id: str | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Recent automation logs, newest first, optionally for one source ID."""
    query = db.query(AutomationLog)
    if source_id:
        query = query.filter(AutomationLog.source_id == source_id)
    rows = query.order_by(AutomationLog.created_at.desc()).limit(limit).all()
    return [_log_response(r) for r in rows]
