"""Tests for Jaro-Winkler similarity."""

import pytest

from payee_ml.inference.classification import jaro, jaro_winkler

PAIRS = [
    ("MARTHA", "MARHTA"),
    ("DWAYNE", "DUANE"),
    ("DIXON", "DICKSONX"),
    ("JOHN SMITH", "JON SMITH"),
    ("ACME CORP", "ACME CORPORATION"),
    ("A", "B"),
    ("", "ABC"),
    ("ABCDEF", "FEDCBA"),
]


class TestJaro:
    def test_classic_value(self) -> None:
        assert jaro("MARTHA", "MARHTA") == pytest.approx(0.9444, abs=1e-4)

    def test_no_matches(self) -> None:
        assert jaro("ABC", "XYZ") == 0.0

    def test_empty(self) -> None:
        assert jaro("", "ABC") == 0.0
        assert jaro("", "") == 1.0


class TestJaroWinkler:
    def test_classic_values(self) -> None:
        assert jaro_winkler("MARTHA", "MARHTA") == pytest.approx(0.9611, abs=1e-4)
        assert jaro_winkler("DWAYNE", "DUANE") == pytest.approx(0.84, abs=1e-4)

    @pytest.mark.parametrize(("a", "b"), PAIRS)
    def test_symmetric(self, a: str, b: str) -> None:
        assert jaro_winkler(a, b) == jaro_winkler(b, a)

    @pytest.mark.parametrize("text", ["", "A", "JOHN SMITH", "株式会社"])
    def test_identity(self, text: str) -> None:
        assert jaro_winkler(text, text) == 1.0

    @pytest.mark.parametrize(("a", "b"), PAIRS)
    def test_in_unit_interval(self, a: str, b: str) -> None:
        assert 0.0 <= jaro_winkler(a, b) <= 1.0

    def test_prefix_boost(self) -> None:
        assert jaro_winkler("JOHN SMITH", "JON SMITH") > jaro("JOHN SMITH", "JON SMITH")

    def test_deterministic(self) -> None:
        scores = {jaro_winkler("ACME CORP", "ACME CORPORATION") for _ in range(5)}
        assert len(scores) == 1
