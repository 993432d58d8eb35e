"""
Unit tests for source ID derivation and form normalization.
"""
import pytest

from packages.shared.models import ExtractedIdentity
from packages.shared.utils.source_id import derive_key, normalize_form_dob, normalize_form_name


def test_derive_key():
    assert derive_key("Smith", "John", "03/15/1985") == "Smith_John__03_15_1985"


def test_derive_key_preserves_case():
    assert derive_key("mcDonald", "ANNA", "01/02/2003") == "mcDonald_ANNA__01_02_2003"


def test_underscores_in_names_are_ambiguous():
    a = derive_key("Smith_Jones", "Ann", "01/02/2003")
    b = derive_key("Smith", "Jones_Ann", "01/02/2003")
    assert a == b == "Smith_Jones_Ann__01_02_2003"


class TestCanonicalKey:
    def test_absent_until_complete(self):
        identity = ExtractedIdentity(first_name="John", last_name="Smith")
        assert identity.canonical_key is None

    def test_present_when_complete(self):
        identity = ExtractedIdentity(first_name="John", last_name="Smith", date_of_birth="03/15/1985")
        assert identity.canonical_key == "Smith_John__03_15_1985"

    def test_serialized(self):
        identity = ExtractedIdentity(first_name="John", last_name="Smith", date_of_birth="03/15/1985")
        assert identity.model_dump()["canonical_key"] == "Smith_John__03_15_1985"

    def test_confidence_bounds(self):
        with pytest.raises(ValueError):
            ExtractedIdentity(confidence=1.5)


class TestFormDob:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1985-03-15", "03/15/1985"),
            ("1985-3-5", "03/05/1985"),
            ("3/5/1985", "03/05/1985"),
            ("03-05-1985", "03/05/1985"),
            (" 03/15/1985 ", "03/15/1985"),
            ("garbage", "garbage"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_form_dob(raw) == expected

    def test_blank(self):
        assert normalize_form_dob(None) is None
        assert normalize_form_dob("   ") is None


class TestFormName:
    def test_joins_whitespace(self):
        assert normalize_form_name("  Mary   Ann ") == "Mary_Ann"

    def test_blank(self):
        assert normalize_form_name("   ") is None
        assert normalize_form_name(None) is None
