"""
Unit tests for missing-field resolution (step 4) and the bundled resolvers.
"""
import asyncio

import pytest

from apps.intake.resolvers import PROMPTS, ConsolePromptResolver, StaticResolver
from apps.intake.steps.step03_identity import identity_from_fields
from apps.intake.steps.step04_resolve import merge_patch, resolve_incomplete, resolve_incomplete_async
from packages.shared.errors import IncompleteIdentityError
from packages.shared.models import ExtractedIdentity, IdentityPatch


def _name_only():
    return ExtractedIdentity(first_name="John", last_name="Smith", confidence=0.5)


def _complete():
    return ExtractedIdentity(first_name="John", last_name="Smith", date_of_birth="03/15/1985", confidence=1.0)


class RecordingResolver:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def __call__(self, identity):
        self.calls.append(identity)
        return self.result


class TestResolveIncomplete:
    def test_fills_missing_dob(self):
        resolver = RecordingResolver(IdentityPatch(date_of_birth="03/15/1985"))
        resolved = resolve_incomplete(_name_only(), resolver)
        assert resolved.canonical_key == "Smith_John__03_15_1985"
        assert len(resolver.calls) == 1
        assert resolver.calls[0].missing_fields == ["date_of_birth"]

    def test_confidence_unchanged_by_resolver(self):
        resolved = resolve_incomplete(_name_only(), RecordingResolver({"date_of_birth": "03/15/1985"}))
        assert resolved.confidence == 0.5

    def test_not_called_when_complete(self):
        def resolver(identity):
            raise AssertionError("resolver must not be called")

        identity = _complete()
        assert resolve_incomplete(identity, resolver) is identity

    def test_extracted_values_not_overwritten(self):
        resolver = RecordingResolver({"first_name": "Other", "date_of_birth": "01/01/1990"})
        resolved = resolve_incomplete(_name_only(), resolver)
        assert resolved.first_name == "John"
        assert resolved.date_of_birth == "01/01/1990"

    def test_unknown_keys_ignored(self):
        resolver = RecordingResolver({"date_of_birth": "01/01/1990", "mrn": "12345"})
        assert resolve_incomplete(_name_only(), resolver).date_of_birth == "01/01/1990"

    def test_resolver_returns_none(self):
        with pytest.raises(IncompleteIdentityError) as exc_info:
            resolve_incomplete(_name_only(), RecordingResolver(None))
        assert exc_info.value.missing_fields == ["date_of_birth"]

    def test_blank_values_do_not_fill(self):
        with pytest.raises(IncompleteIdentityError):
            resolve_incomplete(_name_only(), RecordingResolver({"date_of_birth": "   "}))

    def test_no_resolver(self):
        with pytest.raises(IncompleteIdentityError) as exc_info:
            resolve_incomplete(ExtractedIdentity())
        assert exc_info.value.missing_fields == ["first_name", "last_name", "date_of_birth"]
        assert "missing: first_name, last_name, date_of_birth" in str(exc_info.value)

    def test_error_carries_merged_identity(self):
        resolver = RecordingResolver({"first_name": "John"})
        with pytest.raises(IncompleteIdentityError) as exc_info:
            resolve_incomplete(ExtractedIdentity(date_of_birth="03/15/1985"), resolver)
        assert exc_info.value.missing_fields == ["last_name"]
        assert exc_info.value.identity.first_name == "John"

    def test_input_not_mutated(self):
        identity = _name_only()
        resolve_incomplete(identity, RecordingResolver({"date_of_birth": "03/15/1985"}))
        assert identity.date_of_birth is None

    def test_async_resolver_rejected_in_sync_path(self):
        async def resolver(identity):
            return {"date_of_birth": "03/15/1985"}

        with pytest.raises(TypeError):
            resolve_incomplete(_name_only(), resolver)


class TestResolveIncompleteAsync:
    def test_async_resolver(self):
        async def resolver(identity):
            await asyncio.sleep(0)
            return IdentityPatch(date_of_birth="03/15/1985")

        resolved = asyncio.run(resolve_incomplete_async(_name_only(), resolver))
        assert resolved.canonical_key == "Smith_John__03_15_1985"

    def test_sync_resolver_accepted(self):
        resolver = RecordingResolver({"date_of_birth": "03/15/1985"})
        resolved = asyncio.run(resolve_incomplete_async(_name_only(), resolver))
        assert resolved.date_of_birth == "03/15/1985"

    def test_still_incomplete(self):
        async def resolver(identity):
            return None

        with pytest.raises(IncompleteIdentityError):
            asyncio.run(resolve_incomplete_async(_name_only(), resolver))


def test_merge_patch_strips_values():
    merged = merge_patch(_name_only(), {"date_of_birth": " 03/15/1985 "})
    assert merged.date_of_birth == "03/15/1985"


class TestConsolePromptResolver:
    def test_prompts_only_for_missing(self):
        asked = []

        def fake_input(prompt):
            asked.append(prompt)
            return "03/15/1985"

        patch = ConsolePromptResolver(fake_input)(_name_only())
        assert asked == [PROMPTS["date_of_birth"]]
        assert patch.date_of_birth == "03/15/1985"
        assert patch.first_name is None

    def test_blank_answer(self):
        patch = ConsolePromptResolver(lambda prompt: "  ")(_name_only())
        assert patch.date_of_birth is None


class TestSameKeyAcrossEntryPaths:
    FORM_KEY = identity_from_fields("John", "Smith", "3/15/1985").canonical_key

    def test_form_key(self):
        assert self.FORM_KEY == "Smith_John__03_15_1985"

    def test_prompt_answer(self):
        resolved = resolve_incomplete(_name_only(), ConsolePromptResolver(lambda prompt: "3/15/1985"))
        assert resolved.date_of_birth == "03/15/1985"
        assert resolved.canonical_key == self.FORM_KEY

    def test_static_resolver(self):
        resolved = resolve_incomplete(_name_only(), StaticResolver(date_of_birth="3/15/1985"))
        assert resolved.canonical_key == self.FORM_KEY

    def test_callback_iso_date(self):
        resolved = resolve_incomplete(_name_only(), lambda identity: {"date_of_birth": "1985-03-15"})
        assert resolved.date_of_birth == "03/15/1985"
        assert resolved.canonical_key == self.FORM_KEY

    def test_async_callback(self):
        async def resolver(identity):
            return IdentityPatch(date_of_birth="3-15-1985")

        resolved = asyncio.run(resolve_incomplete_async(_name_only(), resolver))
        assert resolved.canonical_key == self.FORM_KEY

    def test_callback_names_joined(self):
        resolver = RecordingResolver({"first_name": " Mary  Ann ", "last_name": "Smith"})
        resolved = resolve_incomplete(ExtractedIdentity(date_of_birth="03/15/1985"), resolver)
        assert resolved.canonical_key == identity_from_fields("Mary Ann", "Smith", "03/15/1985").canonical_key
        assert resolved.canonical_key == "Smith_Mary_Ann__03_15_1985"


class TestStaticResolver:
    def test_normalizes_form_values(self):
        resolver = StaticResolver(first_name=" Mary Ann ", date_of_birth="1985-03-15")
        assert resolver.patch.first_name == "Mary_Ann"
        assert resolver.patch.date_of_birth == "03/15/1985"
        assert resolver(_name_only()) is resolver.patch
