"""Payee classification pipeline.

Components, leaves first:
- normalizer, similarity: string primitives
- RuleGate, StructuralParser: deterministic tiers
- Deduplicator: near-duplicate clustering
- KeywordExcluder: placeholder and test-name flagging
- ConsensusVoter, TieredClassifier: per-name escalation
- BatchClassifier: bulk classification with fan-out
"""

from .cache import CacheStats, ClassificationCache
from .classifier import (
    TieredClassifier,
    invalid_input_result,
    labelled_reasoning,
)
from .consensus import ConsensusVoter
from .context import ClassificationConfig, ProgressCallback
from .dedup import Deduplicator
from .exclusion import KeywordExcluder
from .normalizer import normalize
from .orchestrator import (
    DERIVED_MARKER,
    BatchClassifier,
    derived_result,
    is_derived,
)
from .rule_gate import RuleGate, RuleMatch, Signal
from .similarity import jaro, jaro_winkler
from .structural import (
    ParsedName,
    StructuralParser,
    TokenLabel,
    fallback_classification,
    offline_heuristic,
)

__all__ = [
    "DERIVED_MARKER",
    "BatchClassifier",
    "CacheStats",
    "ClassificationCache",
    "ClassificationConfig",
    "ConsensusVoter",
    "Deduplicator",
    "KeywordExcluder",
    "ParsedName",
    "ProgressCallback",
    "RuleGate",
    "RuleMatch",
    "Signal",
    "StructuralParser",
    "TieredClassifier",
    "TokenLabel",
    "derived_result",
    "fallback_classification",
    "invalid_input_result",
    "is_derived",
    "jaro",
    "jaro_winkler",
    "labelled_reasoning",
    "normalize",
    "offline_heuristic",
]
