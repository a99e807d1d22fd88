"""Tests for the session classification cache."""

from payee_ml.data_models import ClassificationResult, PayeeType, Tier
from payee_ml.inference.classification import ClassificationCache


def result(label: PayeeType = PayeeType.BUSINESS, confidence: int = 90) -> ClassificationResult:
    return ClassificationResult(
        classification=label,
        confidence=confidence,
        reasoning="test",
        tier=Tier.AI_CONSENSUS,
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestClassificationCache:
    def test_keyed_by_normalized_name(self) -> None:
        cache = ClassificationCache()
        cache.set_if_absent("Acme Corp.", result())

        assert cache.get("ACME CORP") == result()
        assert cache.get("acme   corp") == result()

    def test_miss(self) -> None:
        cache = ClassificationCache()
        assert cache.get("nobody") is None
        assert cache.stats().misses == 1

    def test_first_write_wins(self) -> None:
        cache = ClassificationCache()
        assert cache.set_if_absent("Acme", result(confidence=90)) is True
        assert cache.set_if_absent("ACME", result(confidence=40)) is False
        assert cache.get("acme").confidence == 90

    def test_ttl_expiry(self) -> None:
        clock = FakeClock()
        cache = ClassificationCache(ttl_seconds=10, clock=clock)
        cache.set_if_absent("Acme", result())

        clock.now = 10.0
        assert cache.get("Acme") is not None
        clock.now = 10.5
        assert cache.get("Acme") is None
        assert len(cache) == 0

    def test_expired_entry_can_be_replaced(self) -> None:
        clock = FakeClock()
        cache = ClassificationCache(ttl_seconds=1, clock=clock)
        cache.set_if_absent("Acme", result(confidence=90))
        clock.now = 5.0
        assert cache.set_if_absent("Acme", result(confidence=40)) is True
        assert cache.get("Acme").confidence == 40

    def test_evicts_oldest(self) -> None:
        cache = ClassificationCache(max_entries=2)
        cache.set_if_absent("one", result())
        cache.set_if_absent("two", result())
        cache.set_if_absent("three", result())

        assert len(cache) == 2
        assert cache.get("one") is None
        assert cache.get("three") is not None

    def test_empty_name_not_stored(self) -> None:
        cache = ClassificationCache()
        assert cache.set_if_absent("  ", result()) is False
        assert len(cache) == 0

    def test_stats_and_clear(self) -> None:
        cache = ClassificationCache()
        cache.set_if_absent("Acme", result())
        cache.get("Acme")
        cache.get("Other")

        stats = cache.stats()
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)

        cache.clear()
        assert cache.stats().size == 0
        assert cache.stats().hits == 0
