"""Per-call classification configuration and progress reporting."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from payee_ml.config import Settings

# (current, total, percentage, phase)
ProgressCallback = Callable[[int, int, float, str], None]


@dataclass(frozen=True)
class ClassificationConfig:
    """Knobs for one classification call or batch run."""

    ai_threshold: int = 80
    bypass_rule_tiers: bool = False
    offline_mode: bool = False
    use_consensus: bool = True
    consensus_runs: int = 3
    dedup_enabled: bool = True
    similarity_threshold: float = 0.85
    max_concurrency: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> ClassificationConfig:
        return cls(
            ai_threshold=settings.ai_threshold,
            use_consensus=settings.use_consensus,
            consensus_runs=settings.consensus_runs,
            dedup_enabled=settings.dedup_enabled,
            similarity_threshold=settings.similarity_threshold,
            max_concurrency=settings.max_concurrency,
        )

    def with_overrides(self, **overrides: object) -> ClassificationConfig:
        """Copy with the non-None ``overrides`` applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
