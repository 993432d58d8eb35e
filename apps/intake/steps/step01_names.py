"""
Step 1 — Patient name matching.

Rules are tried in order and the first rule that matches wins; later rules
are never consulted, even when they would also match. Keywords are
case-insensitive, the captured first/last name tokens must be capitalized.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

_NAME_TOKEN = r"([A-Z][a-z]+)"
_FULL_NAME = rf"{_NAME_TOKEN}\s+{_NAME_TOKEN}"


@dataclass(frozen=True)
class NameRule:
    rule_id: str
    pattern: re.Pattern

    def match(self, text: str) -> tuple[str, str] | None:
        m = self.pattern.search(text)
        if not m:
            return None
        return m.group(1).strip(), m.group(2).strip()


# ── Name rules (most specific first) ─────────────────────────────────────

NAME_RULES: tuple[NameRule, ...] = (
    # "patient named John Smith", "patient is John Smith", "Patient Name: John Smith"
    NameRule("patient_named", re.compile(rf"\b(?i:patient\s+(?:is|named?))[:\s]+{_FULL_NAME}")),
    # "Dr. John Smith", "Mrs. Jane Doe"
    NameRule("honorific", re.compile(rf"\b(?i:dr\.|doctor|mrs\.|mr\.|ms\.|miss)\s+{_FULL_NAME}")),
    # "her name is Jane Doe"
    NameRule("name_is", re.compile(rf"\b(?i:name\s+is)\s+{_FULL_NAME}")),
    # "note for John Smith"
    NameRule("for_name", re.compile(rf"\b(?i:for)\s+{_FULL_NAME}")),
    NameRule("treating_name", re.compile(rf"\b(?i:treating)\s+{_FULL_NAME}")),
    # "seeing patient John Smith"
    NameRule("patient_name", re.compile(rf"\b(?i:patient)\s+{_FULL_NAME}")),
    # "John Smith, born ..."
    NameRule("name_born", re.compile(rf"\b{_FULL_NAME},?\s+(?i:born|dob|date\s+of\s+birth)\b")),
)


def match_name(text: str, rules: tuple[NameRule, ...] = NAME_RULES) -> tuple[str, str, str] | None:
    """Return (first_name, last_name, rule_id) for the first matching rule."""
    if not text:
        return None
    for rule in rules:
        hit = rule.match(text)
        if hit:
            return hit[0], hit[1], rule.rule_id
    return None
