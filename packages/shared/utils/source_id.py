"""
Source ID (canonical patient key) helpers.

Format: ``{LAST}_{FIRST}__{MM}_{DD}_{YYYY}``. Downstream chains receive this
string as both ``source_id`` and ``Patient_ID``, so the separators are a wire
contract: single underscore between the names, double underscore before the
date. Name case is preserved and underscores already inside a name are not
escaped (``Mary_Ann`` produces an ambiguous key).
"""
from __future__ import annotations

import re

_ISO_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")
_US_DATE_RE = re.compile(r"^\s*(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})\s*$")


def derive_key(last_name: str, first_name: str, date_of_birth: str) -> str:
    """Build the source ID from a MM/DD/YYYY date of birth."""
    return f"{last_name}_{first_name}__{date_of_birth.replace('/', '_')}"


def normalize_form_dob(value: str | None) -> str | None:
    """
    Normalize a DOB typed into a form to MM/DD/YYYY.

    Accepts HTML date input (YYYY-MM-DD) and M/D/YYYY or M-D-YYYY. Anything
    else is returned stripped and unchanged.
    """
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    m = _ISO_DATE_RE.match(raw)
    if m:
        return f"{m.group(2).zfill(2)}/{m.group(3).zfill(2)}/{m.group(1)}"
    m = _US_DATE_RE.match(raw)
    if m:
        return f"{m.group(1).zfill(2)}/{m.group(2).zfill(2)}/{m.group(3)}"
    return raw


def normalize_form_name(value: str | None) -> str | None:
    """Trim a typed name and join internal whitespace with underscores."""
    if value is None:
        return None
    parts = value.split()
    if not parts:
        return None
    return "_".join(parts)
