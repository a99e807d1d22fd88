"""Flagging of placeholder and test payee names by exclusion keyword."""

import logging
from collections.abc import Iterable

from payee_ml.config import gazetteers
from payee_ml.data_models import KeywordExclusion

from .normalizer import normalize

logger = logging.getLogger(__name__)

NOT_CONFIGURED_REASON = "No exclusion keywords configured"
NO_MATCH_REASON = "No exclusion keywords matched"


class KeywordExcluder:
    """Whole-word keyword matching on normalized names.

    Keywords go through the same normalization as payee names, so "n/a"
    matches "N/A" and "N.A." alike, while "TEST" does not match "TESTER".
    A match only flags the name; its classification is left alone.
    """

    def __init__(self, keywords: Iterable[str] = gazetteers.EXCLUSION_KEYWORDS):
        # normalized keyword -> keyword as configured
        self._keywords: dict[str, str] = {}
        for keyword in keywords:
            key = normalize(keyword or "")
            if key:
                self._keywords.setdefault(key, keyword.strip())

    @property
    def keywords(self) -> list[str]:
        return list(self._keywords.values())

    def check(self, name: str) -> KeywordExclusion:
        if not self._keywords:
            return KeywordExclusion(reasoning=NOT_CONFIGURED_REASON)

        padded = f" {normalize(name or '')} "
        matched = [kw for key, kw in self._keywords.items() if f" {key} " in padded]
        if not matched:
            return KeywordExclusion(reasoning=NO_MATCH_REASON)

        logger.debug("Exclusion keywords in %r: %s", name, matched)
        return KeywordExclusion(
            is_excluded=True,
            matched_keywords=matched,
            confidence=100,
            reasoning=f"Excluded due to keyword matches: {', '.join(matched)}",
        )
