"""
Step 4 — Missing-field resolution.

When extraction leaves the source ID incomplete, a caller-supplied resolver
is asked (at most once) for the missing fields. Values only fill fields that
are still empty; extracted values are never overwritten. Any field still
missing afterwards raises IncompleteIdentityError, which blocks the chain
trigger.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from packages.shared.errors import IncompleteIdentityError
from packages.shared.models import IDENTITY_FIELDS, ExtractedIdentity, IdentityPatch
from packages.shared.utils.source_id import normalize_form_dob, normalize_form_name

logger = logging.getLogger(__name__)

ResolverReturn = Union[IdentityPatch, Mapping[str, Any], None]
Resolver = Callable[[ExtractedIdentity], Union[ResolverReturn, Awaitable[ResolverReturn]]]


def _coerce_patch(supplied: ResolverReturn) -> IdentityPatch:
    if supplied is None:
        return IdentityPatch()
    if isinstance(supplied, IdentityPatch):
        return supplied
    return IdentityPatch(**{k: v for k, v in dict(supplied).items() if k in IDENTITY_FIELDS})


_NORMALIZERS = {
    "first_name": normalize_form_name,
    "last_name": normalize_form_name,
    "date_of_birth": normalize_form_dob,
}


def merge_patch(identity: ExtractedIdentity, supplied: ResolverReturn) -> ExtractedIdentity:
    """
    Return a copy of *identity* with empty fields filled from *supplied*.

    Every supplied value goes through the form normalizers, so a prompt
    answer, a callback and a posted form yield the same source ID.
    """
    patch = _coerce_patch(supplied)
    updates: dict[str, str] = {}
    for field in IDENTITY_FIELDS:
        if getattr(identity, field):
            continue
        value = _NORMALIZERS[field](getattr(patch, field))
        if value:
            updates[field] = value
    return identity.model_copy(update=updates, deep=True)


def _finish(merged: ExtractedIdentity) -> ExtractedIdentity:
    missing = merged.missing_fields
    if missing:
        logger.warning("Identity still incomplete after resolution; missing=%s", missing)
        raise IncompleteIdentityError(missing, merged)
    return merged


def resolve_incomplete(
    identity: ExtractedIdentity,
    resolver: Optional[Resolver] = None,
) -> ExtractedIdentity:
    """
    Fill missing identity fields through *resolver* (synchronous).

    Returns the identity unchanged when the source ID is already present.
    Raises IncompleteIdentityError when fields remain missing, including
    when no resolver is configured.
    """
    if identity.canonical_key:
        return identity
    if resolver is None:
        return _finish(identity)

    logger.info("Requesting missing identity fields from resolver: %s", identity.missing_fields)
    supplied = resolver(identity.model_copy(deep=True))
    if inspect.isawaitable(supplied):
        close = getattr(supplied, "close", None)
        if close is not None:
            close()
        raise TypeError("Resolver returned an awaitable; use resolve_incomplete_async")
    return _finish(merge_patch(identity, supplied))


async def resolve_incomplete_async(
    identity: ExtractedIdentity,
    resolver: Optional[Resolver] = None,
) -> ExtractedIdentity:
    """Same as resolve_incomplete, awaiting the resolver when it is async."""
    if identity.canonical_key:
        return identity
    if resolver is None:
        return _finish(identity)

    logger.info("Awaiting missing identity fields from resolver: %s", identity.missing_fields)
    supplied = resolver(identity.model_copy(deep=True))
    if inspect.isawaitable(supplied):
        supplied = await supplied
    return _finish(merge_patch(identity, supplied))
