"""
Dictation pipeline: extract, resolve, trigger.

The extractor never hands the trigger client an incomplete identity:
IncompleteIdentityError propagates to the caller before any request is made.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from packages.shared.errors import ChainTriggerError, IncompleteIdentityError
from packages.shared.models import DictationOutcome, EntryPath, ExtractedIdentity, ExtractionState

from apps.intake.chain_trigger import DEFAULT_CHAIN_NAME, ChainTriggerClient
from apps.intake.steps.step03_identity import extract_identity
from apps.intake.steps.step04_resolve import Resolver, resolve_incomplete, resolve_incomplete_async

logger = logging.getLogger(__name__)


def _log_extraction(source: str, identity: ExtractedIdentity) -> None:
    logger.info(
        "[%s] Step 1-3: extraction state=%s confidence=%.1f name_rule=%s dob_rule=%s",
        source,
        identity.state.value,
        identity.confidence,
        identity.name_rule,
        identity.dob_rule,
    )
    if identity.state != ExtractionState.COMPLETE:
        logger.info(
            "[%s] Step 4: %s, missing=%s",
            source,
            ExtractionState.AWAITING_RESOLUTION.value,
            identity.missing_fields,
        )


def _trigger(
    source: str,
    identity: ExtractedIdentity,
    transcript: str,
    client: Optional[ChainTriggerClient],
    chain_name: str,
    payload_options: dict[str, Any],
) -> DictationOutcome:
    if client is None:
        return DictationOutcome(identity=identity)

    logger.info("[%s] Step 5: triggering chain %s", source, chain_name)
    result = client.trigger(identity, transcript, chain_name, **payload_options)
    if not result.success:
        logger.error("[%s] Chain %s failed: %s", source, chain_name, result.error)
        raise ChainTriggerError(result, identity)
    return DictationOutcome(identity=identity, result=result)


def process_dictation(
    transcript: str,
    *,
    resolver: Optional[Resolver] = None,
    client: Optional[ChainTriggerClient] = None,
    chain_name: str = DEFAULT_CHAIN_NAME,
    source: EntryPath = EntryPath.AMBIENT_DICTATION,
    **payload_options: Any,
) -> DictationOutcome:
    """
    Run a transcript through extraction, resolution and (optionally) the
    chain trigger.

    Raises IncompleteIdentityError when the identity cannot be completed and
    ChainTriggerError when the webhook reports a failure.
    """
    identity = extract_identity(transcript)
    _log_extraction(source.value, identity)

    try:
        identity = resolve_incomplete(identity, resolver)
    except IncompleteIdentityError as exc:
        logger.warning("[%s] %s, missing=%s", source.value, ExtractionState.FAILED.value, exc.missing_fields)
        raise

    payload_options.setdefault("transcription_source", source.value)
    return _trigger(source.value, identity, transcript, client, chain_name, payload_options)


async def process_dictation_async(
    transcript: str,
    *,
    resolver: Optional[Resolver] = None,
    client: Optional[ChainTriggerClient] = None,
    chain_name: str = DEFAULT_CHAIN_NAME,
    source: EntryPath = EntryPath.AMBIENT_DICTATION,
    **payload_options: Any,
) -> DictationOutcome:
    """process_dictation with an awaitable resolver (network callback, UI prompt)."""
    identity = extract_identity(transcript)
    _log_extraction(source.value, identity)

    try:
        identity = await resolve_incomplete_async(identity, resolver)
    except IncompleteIdentityError as exc:
        logger.warning("[%s] %s, missing=%s", source.value, ExtractionState.FAILED.value, exc.missing_fields)
        raise

    payload_options.setdefault("transcription_source", source.value)
    return _trigger(source.value, identity, transcript, client, chain_name, payload_options)
