"""
Unit tests for date of birth matching and normalization (step 2).
"""
import re

from apps.intake.steps.step02_dob import (
    DOB_RULES,
    MONTH_NAME,
    DobRule,
    expand_year,
    is_plausible_dob,
    match_dob,
    month_number,
    normalize_month_name,
)


class TestKeywordNumeric:
    def test_full_year(self):
        assert match_dob("DOB: 03/15/1985") == ("03/15/1985", "keyword_numeric")

    def test_zero_pads(self):
        assert match_dob("born on 3-5-1990") == ("03/05/1990", "keyword_numeric")

    def test_two_digit_year_becomes_20yy(self):
        # regression pin: downstream source IDs were created with this expansion
        assert match_dob("dob: 3/15/85") == ("03/15/2085", "keyword_numeric")

    def test_two_digit_year_after_born(self):
        dob, _ = match_dob("born 3/15/85")
        assert dob == "03/15/2085"
        assert dob != "03/15/85"

    def test_out_of_range_passes_through(self):
        assert match_dob("DOB: 13/45/1990") == ("13/45/1990", "keyword_numeric")


class TestMonthName:
    def test_keyword_with_ordinal(self):
        assert match_dob("born March 15th, 1985") == ("03/15/1985", "keyword_month_name")

    def test_keyword_sentence(self):
        text = "He was born on March 15th, 1985."
        assert match_dob(text) == ("03/15/1985", "keyword_month_name")

    def test_date_of_birth_is(self):
        assert match_dob("date of birth is January 2nd 1970") == ("01/02/1970", "keyword_month_name")

    def test_month_case_insensitive(self):
        assert match_dob("born MARCH 5, 1960") == ("03/05/1960", "keyword_month_name")

    def test_plain_month_name(self):
        assert match_dob("Visit on December 1st, 2020") == ("12/01/2020", "month_name")

    def test_abbreviated_month_not_matched(self):
        assert match_dob("Mar 15, 1985") is None


class TestPlainNumeric:
    def test_plain_date(self):
        assert match_dob("Seen 7/4/2001 in clinic") == ("07/04/2001", "numeric")

    def test_plain_two_digit_year_not_matched(self):
        assert match_dob("Seen 7/4/01 in clinic") is None


class TestDobPrecedence:
    def test_keyword_beats_earlier_plain_date(self):
        text = "Visit 01/05/2024. DOB: 02/03/1950"
        assert match_dob(text) == ("02/03/1950", "keyword_numeric")

    def test_numeric_family_before_month_family(self):
        text = "born March 3rd, 1950; dob 04/04/1951"
        assert match_dob(text) == ("04/04/1951", "keyword_numeric")


class TestHelpers:
    def test_expand_year(self):
        assert expand_year("85") == "2085"
        assert expand_year("1985") == "1985"
        assert expand_year("198") == "198"

    def test_month_number_prefix(self):
        assert month_number("MARCH") == 3
        assert month_number("Marching") == 3
        assert month_number("Sept") is None

    def test_normalize_month_name_rejects_non_month(self):
        assert normalize_month_name("Mar", "1", "2000") is None
        assert normalize_month_name("july", "4", "1976") == "07/04/1976"

    def test_is_plausible_dob(self):
        assert is_plausible_dob("03/15/1985")
        assert not is_plausible_dob("13/45/1990")
        assert not is_plausible_dob("not a date")


def test_non_month_token_falls_through_to_later_rules():
    loose = DobRule("loose_month", MONTH_NAME, re.compile(r"([A-Za-z]+)\s+(\d{1,2}),?\s+(\d{4})"))
    rules = (loose,) + DOB_RULES
    assert match_dob("Mar 15, 1985; DOB: 04/04/1951", rules) == ("04/04/1951", "keyword_numeric")


def test_empty_text():
    assert match_dob("") is None
