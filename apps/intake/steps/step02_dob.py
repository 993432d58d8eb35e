"""
Step 2 — Date of birth matching + normalization to MM/DD/YYYY.

Two families, tried in order, first match wins:
  numeric     M/D/Y or M-D-Y (keyword-prefixed form accepts 2-4 digit years)
  month name  Month D[st|nd|rd|th][,] YYYY

Known limitations kept on purpose (downstream source IDs depend on them):
  - a two-digit year always expands to 20YY ("85" -> "2085")
  - month/day ranges are not validated; "13/45/1990" passes through
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MONTH_NAMES: tuple[str, ...] = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

_KEYWORD = r"\b(?:born|dob|date\s+of\s+birth|birthday)(?:\s+(?:on|is))?[:\s]+"
_MONTH_TOKEN = "((?:" + "|".join(MONTH_NAMES) + r")[a-z]*)"
_ORDINAL_DAY = r"(\d{1,2})(?:st|nd|rd|th)?,?"

NUMERIC = "numeric"
MONTH_NAME = "month_name"


@dataclass(frozen=True)
class DobRule:
    rule_id: str
    family: str
    pattern: re.Pattern


# ── DOB rules (keyword-prefixed first) ───────────────────────────────────

DOB_RULES: tuple[DobRule, ...] = (
    DobRule(
        "keyword_numeric",
        NUMERIC,
        re.compile(_KEYWORD + r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})(?!\d)", re.IGNORECASE),
    ),
    DobRule(
        "keyword_month_name",
        MONTH_NAME,
        re.compile(_KEYWORD + _MONTH_TOKEN + r"\s+" + _ORDINAL_DAY + r"\s+(\d{4})", re.IGNORECASE),
    ),
    DobRule(
        "numeric",
        NUMERIC,
        re.compile(r"(?<!\d)(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})(?!\d)"),
    ),
    DobRule(
        "month_name",
        MONTH_NAME,
        re.compile(r"\b" + _MONTH_TOKEN + r"\s+" + _ORDINAL_DAY + r"\s+(\d{4})", re.IGNORECASE),
    ),
)


# ── Normalization helpers ────────────────────────────────────────────────


def expand_year(year: str) -> str:
    """Two-digit years are read as 20YY; anything else is kept verbatim."""
    if len(year) == 2:
        return "20" + year
    return year


def month_number(token: str) -> int | None:
    """1-based month for the first full month name the token starts with."""
    low = token.lower()
    for index, name in enumerate(MONTH_NAMES):
        if low.startswith(name):
            return index + 1
    return None


def normalize_numeric(month: str, day: str, year: str) -> str:
    return f"{month.zfill(2)}/{day.zfill(2)}/{expand_year(year)}"


def normalize_month_name(month_token: str, day: str, year: str) -> str | None:
    month = month_number(month_token)
    if month is None:
        return None
    return f"{month:02d}/{day.zfill(2)}/{year}"


def is_plausible_dob(value: str) -> bool:
    """Month 1-12 and day 1-31. Used for warnings only, never to reject."""
    try:
        month, day, _ = (int(part) for part in value.split("/"))
    except ValueError:
        return False
    return 1 <= month <= 12 and 1 <= day <= 31


def match_dob(text: str, rules: tuple[DobRule, ...] = DOB_RULES) -> tuple[str, str] | None:
    """Return (date_of_birth, rule_id) for the first matching rule."""
    if not text:
        return None
    for rule in rules:
        m = rule.pattern.search(text)
        if not m:
            continue
        if rule.family == NUMERIC:
            return normalize_numeric(*m.groups()), rule.rule_id
        value = normalize_month_name(*m.groups())
        if value is None:
            logger.debug("Rule %s matched a non-month token", rule.rule_id)
            continue
        return value, rule.rule_id
    return None
