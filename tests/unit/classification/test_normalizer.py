"""Tests for payee name normalization."""

import pytest

from payee_ml.inference.classification import normalize
from payee_ml.inference.classification.normalizer import fold, tokenize

SAMPLES = [
    "",
    "   ",
    "Acme Corporation LLC",
    "  José's Café, S.A. ",
    "O'Brien, Patrick",
    "Müller & Söhne GmbH",
    "ＡＢＣ　Ｔｒａｄｉｎｇ",
    "株式会社トヨタ",
    "ǅemal Đorđević",
    "straße_42 -- co.",
    "ß",
    "ﬁne ﬂowers",
]


class TestNormalize:
    def test_uppercases_and_strips_diacritics(self) -> None:
        assert normalize("  José's Café, S.A. ") == "JOSES CAFE S A"

    def test_keeps_ampersand(self) -> None:
        assert normalize("Müller & Söhne") == "MULLER & SOHNE"

    def test_collapses_whitespace_and_punctuation(self) -> None:
        assert normalize("Smith,\tJohn\n  A.") == "SMITH JOHN A"

    def test_drops_apostrophes_without_splitting(self) -> None:
        assert normalize("O'Brien") == "OBRIEN"

    def test_fullwidth_characters_folded(self) -> None:
        assert normalize("ＡＢＣ　Ｔｒａｄｉｎｇ") == "ABC TRADING"

    def test_underscore_is_separator(self) -> None:
        assert normalize("acme_corp") == "ACME CORP"

    def test_empty(self) -> None:
        assert normalize("") == ""
        assert normalize("  \t ") == ""

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text: str) -> None:
        once = normalize(text)
        assert normalize(once) == once


class TestFold:
    def test_keeps_punctuation(self) -> None:
        assert fold("Smith, J.") == "SMITH, J."

    @pytest.mark.parametrize("text", SAMPLES)
    def test_fixed_point(self, text: str) -> None:
        once = fold(text)
        assert fold(once) == once


class TestTokenize:
    def test_splits_on_spaces(self) -> None:
        assert tokenize("ACME CORP LLC") == ["ACME", "CORP", "LLC"]

    def test_empty(self) -> None:
        assert tokenize("") == []
