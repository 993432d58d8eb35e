"""
Resolver implementations for missing identity fields.

A resolver is any callable ``(partial_identity) -> IdentityPatch | dict | None``
and may also return an awaitable. These are the two the app ships with.
"""
from __future__ import annotations

from typing import Callable, Optional

from packages.shared.models import ExtractedIdentity, IdentityPatch
from packages.shared.utils.source_id import normalize_form_dob, normalize_form_name

PROMPTS: dict[str, str] = {
    "first_name": "Enter patient's first name: ",
    "last_name": "Enter patient's last name: ",
    "date_of_birth": "Enter patient's date of birth (MM/DD/YYYY): ",
}


class ConsolePromptResolver:
    """Ask on the terminal for each field extraction left empty."""

    def __init__(self, input_fn: Optional[Callable[[str], str]] = None):
        self.input_fn = input_fn if input_fn is not None else input

    def __call__(self, identity: ExtractedIdentity) -> IdentityPatch:
        answers: dict[str, str | None] = {}
        for field in identity.missing_fields:
            answer = self.input_fn(PROMPTS[field]).strip()
            answers[field] = answer or None
        return IdentityPatch(**answers)


class StaticResolver:
    """
    Supply fixed values, e.g. form fields posted alongside a transcript.
    Values are normalized the same way as the manual entry form.
    """

    def __init__(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        date_of_birth: str | None = None,
    ):
        self.patch = IdentityPatch(
            first_name=normalize_form_name(first_name),
            last_name=normalize_form_name(last_name),
            date_of_birth=normalize_form_dob(date_of_birth),
        )

    def __call__(self, identity: ExtractedIdentity) -> IdentityPatch:
        return self.patch
