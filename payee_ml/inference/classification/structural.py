"""Structural name parsing and the cheap offline/fallback heuristics.

The parser labels each token (given name, surname, legal type, ...) and
scores the two readings of the whole string. It knows nothing the rule
gate does not, but it weighs conflicting evidence instead of giving up.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from payee_ml.config import gazetteers
from payee_ml.data_models import ClassificationResult, PayeeType, Tier

from .normalizer import fold, normalize, tokenize

logger = logging.getLogger(__name__)

OFFLINE_CONFIDENCE = 65
FALLBACK_CONFIDENCE = 51
MAX_STRUCTURAL_CONFIDENCE = 95

_INITIAL = re.compile(r"^[A-Z]\.?$")
_POSSESSIVE = re.compile(r"[A-Z]['’]S\b")
_DIGIT = re.compile(r"\d")


class TokenLabel(str, Enum):
    TITLE = "Title"
    GIVEN_NAME = "GivenName"
    SURNAME = "Surname"
    MIDDLE_INITIAL = "MiddleInitial"
    GENERATIONAL = "SuffixGenerational"
    CREDENTIAL = "SuffixCredential"
    LEGAL_TYPE = "CorporationLegalType"
    BUSINESS_WORD = "CorporationKeyword"
    CONJUNCTION = "Conjunction"
    ARTICLE = "Article"
    NUMBER = "Number"
    UNKNOWN = "Unknown"


# Evidence weights per label: (business, individual)
_WEIGHTS: dict[TokenLabel, tuple[int, int]] = {
    TokenLabel.TITLE: (0, 35),
    TokenLabel.GIVEN_NAME: (0, 30),
    TokenLabel.SURNAME: (0, 25),
    TokenLabel.MIDDLE_INITIAL: (0, 20),
    TokenLabel.GENERATIONAL: (0, 30),
    TokenLabel.CREDENTIAL: (0, 25),
    TokenLabel.LEGAL_TYPE: (70, 0),
    TokenLabel.BUSINESS_WORD: (30, 0),
    TokenLabel.CONJUNCTION: (10, 0),
    TokenLabel.ARTICLE: (20, 0),
    TokenLabel.NUMBER: (15, 0),
    TokenLabel.UNKNOWN: (0, 0),
}


@dataclass
class ParsedName:
    """Token labels and the resulting reading of a name."""

    tokens: list[tuple[str, TokenLabel]] = field(default_factory=list)
    business_score: int = 0
    individual_score: int = 0
    evidence: list[str] = field(default_factory=list)

    @property
    def label(self) -> PayeeType | None:
        if self.business_score > self.individual_score:
            return PayeeType.BUSINESS
        if self.individual_score > self.business_score:
            return PayeeType.INDIVIDUAL
        return None

    @property
    def confidence(self) -> int:
        if self.label is None:
            return 0
        margin = abs(self.business_score - self.individual_score)
        return min(MAX_STRUCTURAL_CONFIDENCE, round(50 + 0.75 * margin))


class StructuralParser:
    """Label tokens of a payee name and weigh business vs. personal structure.

    Usage:
        parser = StructuralParser()
        parsed = parser.parse("Smith, John A.")
        parsed.label        # PayeeType.INDIVIDUAL
        parsed.confidence   # 0-95
    """

    name = "structural"

    def __init__(self) -> None:
        self._titles = {normalize(t) for t in gazetteers.HONORIFIC_TITLES}
        self._credentials = {normalize(t) for t in gazetteers.POST_NOMINALS}
        self._generational = {normalize(t) for t in gazetteers.GENERATIONAL_SUFFIXES}
        self._legal = {
            n for n in (normalize(t) for t in gazetteers.LEGAL_SUFFIXES) if " " not in n
        }
        self._keywords = {normalize(t) for t in gazetteers.BUSINESS_KEYWORDS}
        self._first_names = {normalize(n) for n in gazetteers.FIRST_NAMES}
        self._last_names = {normalize(n) for n in gazetteers.LAST_NAMES}

    def parse(self, text: str) -> ParsedName:
        folded = fold(text).strip()
        tokens = tokenize(normalize(text))
        parsed = ParsedName()
        if not tokens:
            return parsed

        comma_form = "," in folded and folded.count(",") == 1
        for i, token in enumerate(tokens):
            label = self._label(token, i, tokens, comma_form)
            parsed.tokens.append((token, label))
            b, ind = _WEIGHTS[label]
            parsed.business_score += b
            parsed.individual_score += ind
            if label is not TokenLabel.UNKNOWN:
                parsed.evidence.append(f"{token}={label.value}")

        self._score_shape(folded, tokens, parsed)
        logger.debug(
            "Parsed %r: %s (business=%d, individual=%d)",
            text,
            parsed.tokens,
            parsed.business_score,
            parsed.individual_score,
        )
        return parsed

    def classify(self, text: str) -> ClassificationResult | None:
        """Structural reading as a result, or None when undecided."""
        parsed = self.parse(text)
        if parsed.label is None:
            return None
        return ClassificationResult(
            classification=parsed.label,
            confidence=parsed.confidence,
            reasoning=(
                f"Structural parse ({parsed.label.value.lower()}): "
                + (", ".join(parsed.evidence) or "name shape only")
            ),
            tier=Tier.STRUCTURAL,
            matching_rules=[f"Structure: {e}" for e in parsed.evidence],
        )

    def _label(
        self, token: str, index: int, tokens: list[str], comma_form: bool
    ) -> TokenLabel:
        last = len(tokens) - 1
        if token in self._legal:
            return TokenLabel.LEGAL_TYPE
        if token in self._keywords:
            return TokenLabel.BUSINESS_WORD
        if token in {"&", "AND", "Y", "UND", "ET"} and 0 < index < last:
            return TokenLabel.CONJUNCTION
        if index == 0 and token == "THE":
            return TokenLabel.ARTICLE
        if _DIGIT.search(token):
            return TokenLabel.NUMBER
        if index == 0 and token in self._titles and last > 0:
            return TokenLabel.TITLE
        if index == last and index >= 2 and token in self._generational:
            return TokenLabel.GENERATIONAL
        if index > 0 and token in self._credentials:
            return TokenLabel.CREDENTIAL
        if _INITIAL.match(token) and 0 < index:
            return TokenLabel.MIDDLE_INITIAL
        if token in self._first_names and (comma_form or index <= 1):
            return TokenLabel.GIVEN_NAME
        if token in self._last_names:
            return TokenLabel.SURNAME
        if token in self._first_names:
            return TokenLabel.GIVEN_NAME
        return TokenLabel.UNKNOWN

    @staticmethod
    def _score_shape(folded: str, tokens: list[str], parsed: ParsedName) -> None:
        n = len(tokens)
        if "," in folded and n in (2, 3) and folded.count(",") == 1:
            parsed.individual_score += 20
            parsed.evidence.append("comma-inverted name")
        if n in (2, 3) and all(t.isalpha() for t in tokens):
            parsed.individual_score += 15
            parsed.evidence.append(f"{n}-word personal shape")
        if n > 4:
            parsed.business_score += 15
            parsed.evidence.append(f"{n} words")
        if _POSSESSIVE.search(folded):
            parsed.business_score += 15
            parsed.evidence.append("possessive")


def offline_heuristic(text: str) -> ClassificationResult:
    """Word-count/punctuation guess used when inference is unavailable."""
    folded = fold(text)
    tokens = tokenize(normalize(text))
    reasons: list[str] = []
    if _DIGIT.search(folded):
        reasons.append("contains digits")
    if "&" in folded:
        reasons.append("contains '&'")
    if len(tokens) > 3:
        reasons.append(f"{len(tokens)} words")

    label = PayeeType.BUSINESS if reasons else PayeeType.INDIVIDUAL
    if not reasons:
        reasons.append(f"{len(tokens)} plain words")
    return ClassificationResult(
        classification=label,
        confidence=OFFLINE_CONFIDENCE,
        reasoning=f"Offline heuristic: {', '.join(reasons)}",
        tier=Tier.STRUCTURAL,
        matching_rules=[f"Offline heuristic: {r}" for r in reasons],
    )


def fallback_classification(text: str, error: BaseException | str) -> ClassificationResult:
    """Conservative word-count guess after the AI tier failed."""
    words = len(tokenize(normalize(text)))
    label = PayeeType.INDIVIDUAL if words <= 2 else PayeeType.BUSINESS
    cause = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
    return ClassificationResult(
        classification=label,
        confidence=FALLBACK_CONFIDENCE,
        reasoning=(
            f"AI classification failed ({cause}); "
            f"{words} word(s) suggests {label.value}"
        ),
        tier=Tier.FALLBACK,
        matching_rules=[],
    )
