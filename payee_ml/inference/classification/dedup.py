"""Fuzzy deduplication of payee names."""

import logging
from collections.abc import Callable, Sequence

from payee_ml.data_models import NameCluster, RawName

from .normalizer import normalize
from .similarity import jaro_winkler

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.85


class Deduplicator:
    """Greedy online clustering of near-duplicate names.

    Exact duplicates (after normalization) always share a cluster. Each
    remaining distinct string joins the first established canonical key
    scoring at least ``threshold``, otherwise it becomes a new canonical.
    The result depends on input order; first-seen names win as canonical.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        similarity: Callable[[str, str], float] = jaro_winkler,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be in [0, 1], got {threshold}")
        self._threshold = threshold
        self._similarity = similarity

    @property
    def threshold(self) -> float:
        return self._threshold

    def cluster(self, names: Sequence[RawName]) -> list[NameCluster]:
        """Group names into clusters, ordered by first appearance."""
        groups: dict[str, list[RawName]] = {}
        for raw in names:
            groups.setdefault(normalize(raw.text), []).append(raw)

        clusters: list[NameCluster] = []
        for key, members in groups.items():
            target = self._first_match(key, clusters)
            if target is None:
                clusters.append(NameCluster(key=key, members=list(members)))
            else:
                logger.debug("Merging %r into cluster %r", key, target.key)
                target.members.extend(members)

        for cluster in clusters:
            cluster.members.sort(key=lambda r: r.origin_row_index)

        logger.info(
            "Deduplicated %d names into %d clusters (threshold=%.2f)",
            len(names),
            len(clusters),
            self._threshold,
        )
        return clusters

    def group(self, names: Sequence[RawName]) -> dict[str, list[RawName]]:
        """Map canonical name -> cluster members."""
        return {c.canonical_name: c.members for c in self.cluster(names)}

    def _first_match(self, key: str, clusters: list[NameCluster]) -> NameCluster | None:
        if not key:
            return None
        for cluster in clusters:
            if cluster.key and self._similarity(key, cluster.key) >= self._threshold:
                return cluster
        return None
