"""
Step 3 — Identity assembly + confidence scoring.

Confidence is additive: 0.5 for a name match, 0.5 for a DOB match. It is
scored from the matches only, never from the derived key.
"""
from __future__ import annotations

import logging

from packages.shared.models import ExtractedIdentity, ExtractionWarning
from packages.shared.utils.source_id import normalize_form_dob, normalize_form_name

from apps.intake.steps.step01_names import match_name
from apps.intake.steps.step02_dob import is_plausible_dob, match_dob

logger = logging.getLogger(__name__)

NAME_WEIGHT = 0.5
DOB_WEIGHT = 0.5


def score_identity(has_name: bool, has_dob: bool) -> float:
    """Compute extraction confidence (0.0–1.0)."""
    score = 0.0
    if has_name:
        score += NAME_WEIGHT
    if has_dob:
        score += DOB_WEIGHT
    return min(score, 1.0)


def _dob_warnings(date_of_birth: str | None) -> list[ExtractionWarning]:
    if date_of_birth and not is_plausible_dob(date_of_birth):
        return [
            ExtractionWarning(
                code="DOB_UNVALIDATED_RANGE",
                message=f"Date of birth {date_of_birth} is outside month/day ranges; passed through unchanged",
            )
        ]
    return []


def extract_identity(text: str) -> ExtractedIdentity:
    """
    Extract first name, last name and date of birth from free text.

    Pure function of its input: no I/O, no shared state. Misses are
    reported as soft warnings, never raised.
    """
    warnings: list[ExtractionWarning] = []
    text = text or ""

    name_hit = match_name(text)
    dob_hit = match_dob(text)

    first_name = last_name = name_rule = None
    if name_hit:
        first_name, last_name, name_rule = name_hit
    else:
        warnings.append(ExtractionWarning(code="NO_NAME_MATCH", message="No patient name pattern matched"))

    date_of_birth = dob_rule = None
    if dob_hit:
        date_of_birth, dob_rule = dob_hit
        warnings.extend(_dob_warnings(date_of_birth))
    else:
        warnings.append(ExtractionWarning(code="NO_DOB_MATCH", message="No date of birth pattern matched"))

    identity = ExtractedIdentity(
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date_of_birth,
        confidence=score_identity(name_hit is not None, dob_hit is not None),
        name_rule=name_rule,
        dob_rule=dob_rule,
        warnings=warnings,
    )
    logger.debug(
        "Identity extraction: name_rule=%s dob_rule=%s confidence=%.1f state=%s",
        name_rule,
        dob_rule,
        identity.confidence,
        identity.state.value,
    )
    return identity


def identity_from_fields(
    first_name: str | None = None,
    last_name: str | None = None,
    date_of_birth: str | None = None,
) -> ExtractedIdentity:
    """
    Build an identity from structured input (manual form, OCR/LLM output).

    Names are trimmed with inner whitespace joined by "_"; the DOB may be
    MM/DD/YYYY, M/D/YYYY or YYYY-MM-DD and is normalized to MM/DD/YYYY.
    Supplied fields score the same as pattern matches.
    """
    first = normalize_form_name(first_name)
    last = normalize_form_name(last_name)
    dob = normalize_form_dob(date_of_birth)
    return ExtractedIdentity(
        first_name=first,
        last_name=last,
        date_of_birth=dob,
        confidence=score_identity(bool(first and last), bool(dob)),
        warnings=_dob_warnings(dob),
    )
