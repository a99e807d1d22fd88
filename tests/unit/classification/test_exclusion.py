"""Tests for exclusion keyword flagging."""

import pytest

from payee_ml.config import gazetteers
from payee_ml.inference.classification import KeywordExcluder


class TestKeywordExcluder:
    @pytest.mark.parametrize(
        ("name", "matched"),
        [
            ("Test Vendor", ["TEST"]),
            ("sample payee - DUMMY", ["SAMPLE", "DUMMY"]),
            ("N/A", ["N/A"]),
            ("Unknown", ["UNKNOWN"]),
        ],
    )
    def test_flags_whole_words(self, name: str, matched: list[str]) -> None:
        exclusion = KeywordExcluder().check(name)

        assert exclusion.is_excluded
        assert exclusion.matched_keywords == matched
        assert exclusion.confidence == 100
        assert exclusion.reasoning.startswith("Excluded due to keyword matches:")

    @pytest.mark.parametrize(
        "name", ["Testa Motors LLC", "Contest Winners Inc", "Jane Doe", ""]
    )
    def test_no_partial_word_matches(self, name: str) -> None:
        exclusion = KeywordExcluder().check(name)

        assert not exclusion.is_excluded
        assert exclusion.matched_keywords == []
        assert exclusion.confidence == 0
        assert exclusion.reasoning == "No exclusion keywords matched"

    def test_custom_keywords_are_normalized(self) -> None:
        excluder = KeywordExcluder(["do not pay", "  ", "Do-Not-Pay"])

        assert excluder.keywords == ["do not pay"]
        assert excluder.check("DO NOT PAY - Acme").matched_keywords == ["do not pay"]
        assert not excluder.check("Acme Payroll").is_excluded

    def test_diacritics_ignored(self) -> None:
        assert KeywordExcluder(["Café"]).check("CAFE Test").matched_keywords == ["Café"]

    def test_empty_list_disables(self) -> None:
        exclusion = KeywordExcluder([]).check("Test Vendor")

        assert not exclusion.is_excluded
        assert exclusion.reasoning == "No exclusion keywords configured"

    def test_default_list(self) -> None:
        assert KeywordExcluder().keywords == list(gazetteers.EXCLUSION_KEYWORDS)
