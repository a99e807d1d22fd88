"""Classification domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class PayeeType(str, Enum):
    """Label assigned to a payee."""

    BUSINESS = "Business"
    INDIVIDUAL = "Individual"


class Tier(str, Enum):
    """Processing stage that produced a classification."""

    RULE_BASED = "RuleBased"
    STRUCTURAL = "Structural"
    AI_CONSENSUS = "AIConsensus"
    FALLBACK = "Fallback"

    @property
    def trust_rank(self) -> int:
        """Higher is more trusted, independent of numeric confidence."""
        return _TRUST_RANK[self]


_TRUST_RANK = {
    Tier.RULE_BASED: 4,
    Tier.STRUCTURAL: 3,
    Tier.AI_CONSENSUS: 2,
    Tier.FALLBACK: 1,
}


def clamp_confidence(value: float) -> int:
    """Round and clamp a confidence value to [0, 100]."""
    return max(0, min(100, round(value)))


class KeywordExclusion(BaseModel):
    """Exclusion keywords found in a payee name. Flags only, never relabels."""

    is_excluded: bool = False
    matched_keywords: list[str] = Field(default_factory=list)
    confidence: int = Field(default=0, ge=0, le=100)
    reasoning: str = ""


class ClassificationResult(BaseModel):
    """Outcome of classifying one payee name."""

    classification: PayeeType
    confidence: int = Field(ge=0, le=100)
    reasoning: str
    tier: Tier
    matching_rules: list[str] = Field(default_factory=list)
    keyword_exclusion: KeywordExclusion | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp(cls, v: float) -> int:
        return clamp_confidence(float(v))


class PayeeClassification(BaseModel):
    """A classification bound to the input row it came from."""

    row_index: int
    payee_name: str
    result: ClassificationResult
    original_data: dict[str, Any] | None = None
    timestamp: datetime


@dataclass(frozen=True)
class RawName:
    """A payee name as ingested, bound to its source row."""

    text: str
    origin_row_index: int
    original_row_data: dict[str, Any] | None = field(default=None, compare=False)


@dataclass
class NameCluster:
    """Near-duplicate names sharing one classification.

    The first member is the canonical one; ``key`` is its normalized form.
    """

    key: str
    members: list[RawName] = field(default_factory=list)

    @property
    def canonical(self) -> RawName:
        return self.members[0]

    @property
    def canonical_name(self) -> str:
        return self.members[0].text
