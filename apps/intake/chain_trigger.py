"""
Chain automation trigger client.

Posts a complete patient identity plus transcript to the chain-run webhook.
One request per call, no retries; callers decide whether to try again.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from packages.shared.errors import IncompleteIdentityError
from packages.shared.models import ChainName, ChainTriggerResult, ExtractedIdentity

logger = logging.getLogger(__name__)

CHAIN_API_URL = os.environ.get("CHAIN_API_URL", "http://localhost:8081/start-chain-run")
CHAIN_LOGS_URL = os.environ.get("CHAIN_LOGS_URL", "http://localhost:8082/")
CHAIN_RUN_EMAIL = os.environ.get("CHAIN_RUN_EMAIL", "")
CHAIN_TIMEOUT_SECONDS = float(os.environ.get("CHAIN_TIMEOUT_SECONDS", "30"))
DEFAULT_CHAIN_NAME = os.environ.get("DEFAULT_CHAIN_NAME", ChainName.QUICK_ADD.value)

RESERVED_VARIABLES: tuple[str, ...] = (
    "ambient_transcript",
    "transcription_source",
    "patient_first_name",
    "patient_last_name",
    "patient_dob",
    "Patient_ID",
    "extraction_confidence",
    "timestamp",
)

_APPSHEET_ID_KEYS =("Run_ID", "_RowNumber", "ID", "Run_Auto_Key", "Chain_Run_Key", "id")


def build_chain_payload(
    identity: ExtractedIdentity,
    transcript: str,
    chain_name: str = DEFAULT_CHAIN_NAME,
    *,
    run_email: str = CHAIN_RUN_EMAIL,
    transcription_source: str = "ambient_dictation_app",
    human_readable_record: str = "Ambient dictation transcript from external app",
    extra_variables: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build the chain-run request body. Requires a complete identity."""
    source_id = identity.canonical_key
    if not source_id:
        raise IncompleteIdentityError(identity.missing_fields, identity)

    # caller extras first; identity fields always win so Patient_ID == source_id
    starting_variables: dict[str, Any] = dict(extra_variables or {})
    overridden = sorted(set(starting_variables) & set(RESERVED_VARIABLES))
    if overridden:
        logger.warning("Ignoring extra variables that shadow reserved keys: %s", overridden)
    starting_variables.update({
        "ambient_transcript": transcript,
        "transcription_source": transcription_source,
        "patient_first_name": identity.first_name,
        "patient_last_name": identity.last_name,
        "patient_dob": identity.date_of_birth,
        "Patient_ID": source_id,
        "extraction_confidence": identity.confidence,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })

    return {
        "run_email": run_email,
        "chain_to_run": chain_name,
        "human_readable_record": human_readable_record,
        "source_id": source_id,
        "first_step_user_input": "",
        "starting_variables": starting_variables,
    }


def parse_chain_run_id(body: Any) -> Optional[str]:
    """Read the chain run id, falling back to an AppSheet rows response."""
    if not isinstance(body, dict):
        return None
    run_id = body.get("ChainRun_ID")
    if run_id:
        return str(run_id)
    responses = body.get("responses") or []
    if responses and isinstance(responses[0], dict):
        rows = responses[0].get("rows") or []
        if rows and isinstance(rows[0], dict):
            for key in _APPSHEET_ID_KEYS:
                if rows[0].get(key):
                    return str(rows[0][key])
    return None


class ChainTriggerClient:
    def __init__(
        self,
        api_url: str = CHAIN_API_URL,
        logs_url: str = CHAIN_LOGS_URL,
        run_email: str = CHAIN_RUN_EMAIL,
        timeout: float = CHAIN_TIMEOUT_SECONDS,
    ):
        self.api_url = api_url
        self.logs_url = logs_url
        self.run_email = run_email
        self.timeout = timeout

    def view_url(self, chain_run_id: Optional[str]) -> str:
        return f"{self.logs_url}?chainRunId={chain_run_id}"

    def trigger(
        self,
        identity: ExtractedIdentity,
        transcript: str,
        chain_name: str = DEFAULT_CHAIN_NAME,
        **payload_options: Any,
    ) -> ChainTriggerResult:
        """
        Trigger *chain_name* for a complete identity.

        Raises IncompleteIdentityError before any request when the source ID
        is missing. HTTP and network failures come back as
        ``success=False`` results.
        """
        payload_options.setdefault("run_email", self.run_email)
        payload = build_chain_payload(identity, transcript, chain_name, **payload_options)

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Chain %s trigger failed: %s", chain_name, exc)
            return ChainTriggerResult(success=False, error=str(exc) or "Network error")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            error = None
            if isinstance(body, dict):
                error = body.get("error") or body.get("message")
            error = error or response.text or "Failed to trigger chain"
            logger.warning(
                "Chain %s trigger rejected: status %s, response: %s",
                chain_name,
                response.status_code,
                error,
            )
            return ChainTriggerResult(success=False, error=str(error), status_code=response.status_code)

        chain_run_id = parse_chain_run_id(body)
        logger.info("Chain %s triggered, chain_run_id=%s", chain_name, chain_run_id)
        return ChainTriggerResult(
            success=True,
            chain_run_id=chain_run_id,
            message=f"Chain {chain_name} triggered successfully",
            view_url=self.view_url(chain_run_id),
            status_code=response.status_code,
        )
