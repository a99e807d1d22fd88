"""Deterministic rule tier: legal suffixes, keywords and name gazetteers."""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from payee_ml.config import gazetteers
from payee_ml.data_models import ClassificationResult, PayeeType, Tier

from .normalizer import fold, normalize, tokenize

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 70
CONFIDENCE_STEP = 5
BUSINESS_CAP = 99
INDIVIDUAL_CAP = 97

_LAST_FIRST = re.compile(r"^[A-Z][A-Z'\-]+,\s*[A-Z][A-Z'\-]+(?:\s+[A-Z]\.?)?$")
_FIRST_INITIAL_LAST = re.compile(r"^[A-Z][A-Z'\-]+\s+[A-Z]\.?\s+[A-Z][A-Z'\-]+$")
_FIRST_LAST = re.compile(r"^[A-Z][A-Z'\-]+\s+[A-Z][A-Z'\-]+$")
_DIGIT = re.compile(r"\d")


class Signal(str, Enum):
    BUSINESS = "business"
    INDIVIDUAL = "individual"


@dataclass(frozen=True)
class RuleMatch:
    """One detector hit. Legal-entity suffixes count double."""

    rule: str
    signal: Signal
    weight: int = 1


def _normalized_unique(entries: tuple[str, ...]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for entry in entries:
        key = normalize(entry)
        if key:
            seen.setdefault(key, None)
    return tuple(seen)


def _contains_phrase(padded: str, phrase: str) -> bool:
    return f" {phrase} " in padded


class RuleGate:
    """Ordered set of independent detectors over a payee name.

    Business-only hits give Business, individual-only hits give Individual,
    anything else (conflict or silence) returns None so the caller escalates.
    Confidence is 70 plus 5 per additional unit of rule weight.
    """

    name = "rule"

    def __init__(self) -> None:
        legal = _normalized_unique(gazetteers.LEGAL_SUFFIXES)
        # Two-letter designators ("CO", "SA", "B V") only count as the last token
        self._terminal_only = frozenset(p for p in legal if len(p.replace(" ", "")) <= 2)
        self._legal = legal
        self._cjk_legal = tuple(fold(s) for s in gazetteers.CJK_LEGAL_SUFFIXES)
        self._keywords = frozenset(_normalized_unique(gazetteers.BUSINESS_KEYWORDS))
        self._government = _normalized_unique(gazetteers.GOVERNMENT_PHRASES)
        self._titles = frozenset(_normalized_unique(gazetteers.HONORIFIC_TITLES))
        self._post_nominals = _normalized_unique(gazetteers.POST_NOMINALS)
        self._generational = frozenset(
            _normalized_unique(gazetteers.GENERATIONAL_SUFFIXES)
        )
        self._first_names = frozenset(normalize(n) for n in gazetteers.FIRST_NAMES)
        self._last_names = frozenset(normalize(n) for n in gazetteers.LAST_NAMES)
        self._business_tokens = self._keywords | frozenset(
            p for p in legal if " " not in p
        )

    def evaluate(self, text: str) -> ClassificationResult | None:
        """Classify ``text`` if the rules agree, else None. Never raises."""
        try:
            matches = self.detect(text)
        except Exception as e:  # NOQA: BLE001
            logger.warning("Rule detectors failed for %r: %s", text, e)
            return None
        return self.decide(matches)

    def detect(self, text: str) -> list[RuleMatch]:
        """Run every detector and collect their hits."""
        norm = normalize(text)
        if not norm:
            return []
        tokens = tokenize(norm)
        padded = f" {norm} "
        folded = fold(text)

        matches: list[RuleMatch] = []
        matches += self._legal_suffixes(norm, padded, folded)
        matches += self._business_keywords(tokens)
        matches += self._government_phrases(padded)
        matches += self._honorifics(tokens, padded)
        matches += self._generational_suffix(tokens)
        matches += self._personal_patterns(folded, tokens)
        matches += self._name_gazetteers(folded, tokens)
        return matches

    @staticmethod
    def decide(matches: list[RuleMatch]) -> ClassificationResult | None:
        business = [m for m in matches if m.signal is Signal.BUSINESS]
        individual = [m for m in matches if m.signal is Signal.INDIVIDUAL]

        if business and individual:
            logger.debug(
                "Rule conflict: business=%s individual=%s",
                [m.rule for m in business],
                [m.rule for m in individual],
            )
            return None
        if not business and not individual:
            return None

        if business:
            label, hits, cap = PayeeType.BUSINESS, business, BUSINESS_CAP
        else:
            label, hits, cap = PayeeType.INDIVIDUAL, individual, INDIVIDUAL_CAP

        weight = sum(m.weight for m in hits)
        confidence = min(cap, BASE_CONFIDENCE + CONFIDENCE_STEP * (weight - 1))
        rules = [m.rule for m in hits]
        return ClassificationResult(
            classification=label,
            confidence=confidence,
            reasoning=f"Rule-based {label.value.lower()} match: {'; '.join(rules)}",
            tier=Tier.RULE_BASED,
            matching_rules=rules,
        )

    # Detectors

    def _legal_suffixes(self, norm: str, padded: str, folded: str) -> list[RuleMatch]:
        matches: list[RuleMatch] = []
        terminal: str | None = None
        for suffix in self._legal:
            at_end = norm == suffix or norm.endswith(f" {suffix}")
            if suffix in self._terminal_only:
                if not at_end or norm == suffix:
                    continue
            elif not _contains_phrase(padded, suffix):
                continue
            matches.append(
                RuleMatch(f"Legal entity suffix: {suffix}", Signal.BUSINESS, 2)
            )
            if at_end and (terminal is None or len(suffix) > len(terminal)):
                terminal = suffix

        for suffix in self._cjk_legal:
            if suffix in folded:
                matches.append(
                    RuleMatch(f"Legal entity suffix: {suffix}", Signal.BUSINESS, 2)
                )

        if terminal is not None:
            matches.append(
                RuleMatch(f"Ends with legal designator: {terminal}", Signal.BUSINESS)
            )
        return matches

    def _business_keywords(self, tokens: list[str]) -> list[RuleMatch]:
        found = dict.fromkeys(t for t in tokens if t in self._keywords)
        return [RuleMatch(f"Business keyword: {k}", Signal.BUSINESS) for k in found]

    def _government_phrases(self, padded: str) -> list[RuleMatch]:
        return [
            RuleMatch(f"Government entity: {phrase}", Signal.BUSINESS)
            for phrase in self._government
            if _contains_phrase(padded, phrase)
        ]

    def _honorifics(self, tokens: list[str], padded: str) -> list[RuleMatch]:
        matches: list[RuleMatch] = []
        if len(tokens) >= 2 and tokens[0] in self._titles:
            matches.append(RuleMatch(f"Personal title: {tokens[0]}", Signal.INDIVIDUAL))
        if len(tokens) >= 2:
            tail = " " + " ".join(tokens[1:]) + " "
            for post in self._post_nominals:
                if _contains_phrase(tail, post):
                    matches.append(
                        RuleMatch(f"Professional credential: {post}", Signal.INDIVIDUAL)
                    )
        return matches

    def _generational_suffix(self, tokens: list[str]) -> list[RuleMatch]:
        if len(tokens) >= 3 and tokens[-1] in self._generational:
            return [RuleMatch(f"Generational suffix: {tokens[-1]}", Signal.INDIVIDUAL)]
        return []

    def _core_name(self, folded: str) -> str:
        """Folded text without a leading title or trailing suffix tokens."""
        words = folded.split()
        if len(words) > 2 and normalize(words[0]) in self._titles:
            words = words[1:]
        while len(words) > 2 and (
            normalize(words[-1]) in self._generational
            or normalize(words[-1]) in self._post_nominals
        ):
            words = words[:-1]
        return " ".join(words).rstrip(",").strip()

    def _personal_patterns(self, folded: str, tokens: list[str]) -> list[RuleMatch]:
        if _DIGIT.search(folded) or any(t in self._business_tokens for t in tokens):
            return []
        core = self._core_name(folded)
        if _LAST_FIRST.match(core):
            return [RuleMatch("Name pattern: Last, First", Signal.INDIVIDUAL)]
        if _FIRST_INITIAL_LAST.match(core):
            return [RuleMatch("Name pattern: First M. Last", Signal.INDIVIDUAL)]
        if _FIRST_LAST.match(core):
            words = normalize(core).split()
            if any(w in self._first_names or w in self._last_names for w in words):
                return [RuleMatch("Name pattern: First Last", Signal.INDIVIDUAL)]
        return []

    def _name_gazetteers(self, folded: str, tokens: list[str]) -> list[RuleMatch]:
        if len(tokens) < 2:
            return []
        core = self._core_name(folded)
        if "," in core:
            last_part, _, first_part = core.partition(",")
            first_words = normalize(first_part).split()
            last_words = normalize(last_part).split()
            first = first_words[0] if first_words else ""
            last = last_words[-1] if last_words else ""
        else:
            words = normalize(core).split()
            if len(words) < 2:
                return []
            first, last = words[0], words[-1]

        matches: list[RuleMatch] = []
        if first in self._first_names:
            matches.append(RuleMatch(f"Common first name: {first}", Signal.INDIVIDUAL))
        if last in self._last_names:
            matches.append(RuleMatch(f"Common last name: {last}", Signal.INDIVIDUAL))
        return matches
