"""Tests for near-duplicate clustering."""

import pytest

from payee_ml.data_models import RawName
from payee_ml.inference.classification import Deduplicator


def raw_names(*texts: str) -> list[RawName]:
    return [RawName(text=t, origin_row_index=i) for i, t in enumerate(texts)]


class TestDeduplicator:
    def test_groups_near_duplicates(self) -> None:
        groups = Deduplicator(0.85).group(
            raw_names("John Smith", "JOHN SMITH", "Jon Smith", "Jane Doe")
        )

        assert {k: [m.text for m in v] for k, v in groups.items()} == {
            "John Smith": ["John Smith", "JOHN SMITH", "Jon Smith"],
            "Jane Doe": ["Jane Doe"],
        }

    def test_exact_duplicates_always_merge(self) -> None:
        clusters = Deduplicator(1.0).cluster(raw_names("Acme", "ACME", " acme "))
        assert len(clusters) == 1
        assert [m.origin_row_index for m in clusters[0].members] == [0, 1, 2]

    def test_threshold_one_keeps_distinct(self) -> None:
        clusters = Deduplicator(1.0).cluster(raw_names("John Smith", "Jon Smith"))
        assert len(clusters) == 2

    def test_first_seen_is_canonical(self) -> None:
        clusters = Deduplicator().cluster(raw_names("Jon Smith", "John Smith"))

        assert len(clusters) == 1
        assert clusters[0].canonical_name == "Jon Smith"
        assert clusters[0].key == "JON SMITH"

    def test_members_sorted_by_row(self) -> None:
        clusters = Deduplicator().cluster(
            raw_names("John Smith", "Jon Smith", "JOHN SMITH")
        )
        assert [m.origin_row_index for m in clusters[0].members] == [0, 1, 2]

    def test_empty_names_cluster_together(self) -> None:
        clusters = Deduplicator().cluster(raw_names("", "  ", "Acme"))

        assert len(clusters) == 2
        assert clusters[0].key == ""
        assert len(clusters[0].members) == 2

    def test_keeps_original_row_data(self) -> None:
        names = [RawName("Acme", 0, {"id": 7}), RawName("ACME", 1, {"id": 8})]
        cluster = Deduplicator().cluster(names)[0]
        assert [m.original_row_data for m in cluster.members] == [{"id": 7}, {"id": 8}]

    def test_empty_input(self) -> None:
        assert Deduplicator().cluster([]) == []

    def test_invalid_threshold(self) -> None:
        with pytest.raises(ValueError):
            Deduplicator(1.5)

    def test_custom_similarity(self) -> None:
        dedup = Deduplicator(0.5, similarity=lambda a, b: 1.0)
        clusters = dedup.cluster(raw_names("Alpha", "Omega"))
        assert len(clusters) == 1

    def test_joins_first_cluster_over_threshold(self) -> None:
        scores = {
            frozenset({"ALPHA", "BRAVO"}): 0.10,
            frozenset({"ALPHA", "CHARLIE"}): 0.86,
            frozenset({"BRAVO", "CHARLIE"}): 0.99,
        }
        dedup = Deduplicator(0.85, similarity=lambda a, b: scores[frozenset({a, b})])

        groups = dedup.group(raw_names("Alpha", "Bravo", "Charlie"))

        assert [m.text for m in groups["Alpha"]] == ["Alpha", "Charlie"]
        assert [m.text for m in groups["Bravo"]] == ["Bravo"]
