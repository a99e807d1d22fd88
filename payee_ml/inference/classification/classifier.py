"""Tiered payee classifier.

Escalation order, first confident answer wins:

1. empty input: Individual, confidence 0, "invalid input"
2. rule gate
3. offline mode only: structural tier, then the offline heuristic
4. ``bypass_rule_tiers`` skips the structural tier
5. structural tier, accepted at ``ai_threshold`` or above
6. AI tier, single sample or consensus vote
7. fallback heuristic if the AI tier fails

Every result carries the keyword exclusion flag for the name it was
returned for.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from payee_ml.data_models import ClassificationResult, PayeeType, Tier
from payee_ml.exceptions import AuthError
from payee_ml.retry import RetryPolicy

from .consensus import ConsensusVoter
from .context import ClassificationConfig
from .exclusion import KeywordExcluder
from .rule_gate import RuleGate
from .structural import StructuralParser, fallback_classification, offline_heuristic

if TYPE_CHECKING:
    from payee_ml.inference.clients import AIClassification, InferenceClient

    from .cache import ClassificationCache

logger = logging.getLogger(__name__)

INVALID_INPUT_REASON = "invalid input"


def invalid_input_result() -> ClassificationResult:
    return ClassificationResult(
        classification=PayeeType.INDIVIDUAL,
        confidence=0,
        reasoning=INVALID_INPUT_REASON,
        tier=Tier.RULE_BASED,
        matching_rules=[],
    )


def labelled_reasoning(label: str, reasoning: str) -> str:
    """Prefix model reasoning with the tier label, leaving the text itself intact."""
    return f"{label}: {reasoning}" if reasoning else label


class TieredClassifier:
    """Classify one payee name through increasingly expensive tiers.

    Usage:
        classifier = TieredClassifier(
            inference=OpenAICompatibleClient(api_key=...),
            retry=RetryPolicy.from_settings(settings),
            cache=ClassificationCache(),
        )
        result = await classifier.classify("Acme Corporation LLC")

    ``classify`` never raises. Batch callers pass ``propagate_auth=True`` so a
    rejected API key aborts the run instead of degrading every row.
    """

    def __init__(
        self,
        rule_gate: RuleGate | None = None,
        structural: StructuralParser | None = None,
        inference: InferenceClient | None = None,
        retry: RetryPolicy | None = None,
        cache: ClassificationCache | None = None,
        default_config: ClassificationConfig | None = None,
        max_ai_concurrency: int = 10,
        excluder: KeywordExcluder | None = None,
    ):
        self._rule_gate = rule_gate or RuleGate()
        self._structural = structural or StructuralParser()
        self._inference = inference
        self._retry = retry or RetryPolicy()
        self._cache = cache
        self._default_config = default_config or ClassificationConfig()
        self._ai_slots = asyncio.Semaphore(max_ai_concurrency)
        self._voter = ConsensusVoter(self._sample)
        self._excluder = excluder or KeywordExcluder()

    @property
    def default_config(self) -> ClassificationConfig:
        return self._default_config

    @property
    def cache(self) -> ClassificationCache | None:
        return self._cache

    @property
    def has_inference(self) -> bool:
        return self._inference is not None

    async def classify(
        self,
        name: str,
        config: ClassificationConfig | None = None,
        *,
        propagate_auth: bool = False,
    ) -> ClassificationResult:
        """Classify ``name``. Returns a result for any input."""
        config = config or self._default_config
        try:
            result = await self._classify(name, config)
        except AuthError as e:
            if propagate_auth:
                raise
            logger.error("AI tier authentication failed: %s", e)
            result = fallback_classification(name or "", e)
        except Exception as e:
            logger.exception("Unexpected classification failure for %r", name)
            result = fallback_classification(name or "", e)
        return self.flag_exclusion(name, result)

    def flag_exclusion(
        self, name: str, result: ClassificationResult
    ) -> ClassificationResult:
        """Copy of ``result`` carrying the exclusion check for ``name``."""
        return result.model_copy(
            update={"keyword_exclusion": self._excluder.check(name)}
        )

    async def _classify(
        self, name: str, config: ClassificationConfig
    ) -> ClassificationResult:
        if not name or not name.strip():
            return invalid_input_result()

        ruled = self._rule_gate.evaluate(name)
        if ruled is not None:
            logger.debug("  Rule tier: %r -> %s", name, ruled.classification.value)
            return ruled

        if self._cache is not None:
            cached = self._cache.get(name)
            if cached is not None:
                logger.debug("  Cache hit: %r", name)
                return cached

        if config.offline_mode:
            if not config.bypass_rule_tiers:
                parsed = self._structural_tier(name, config)
                if parsed is not None:
                    return parsed
            return offline_heuristic(name)

        if not config.bypass_rule_tiers:
            parsed = self._structural_tier(name, config)
            if parsed is not None:
                return self._remember(name, parsed)

        if self._inference is None:
            return fallback_classification(name, "no inference endpoint configured")

        try:
            result = await self._ai_tier(name, config)
        except AuthError:
            raise
        except Exception as e:
            logger.warning(
                "AI tier failed for %r: %s (type: %s)", name, e, type(e).__name__
            )
            return fallback_classification(name, e)

        logger.debug(
            "  AI tier: %r -> %s (%d%%)",
            name,
            result.classification.value,
            result.confidence,
        )
        return self._remember(name, result)

    def _structural_tier(
        self, name: str, config: ClassificationConfig
    ) -> ClassificationResult | None:
        parsed = self._structural.classify(name)
        if parsed is None or parsed.confidence < config.ai_threshold:
            logger.debug(
                "  Structural tier: %r below threshold (%s)",
                name,
                parsed.confidence if parsed else "undecided",
            )
            return None
        return parsed

    async def _ai_tier(
        self, name: str, config: ClassificationConfig
    ) -> ClassificationResult:
        if config.use_consensus and config.consensus_runs > 1:
            return await self._voter.vote(name, config.consensus_runs)

        sample = await self._sample(name)
        return ClassificationResult(
            classification=sample.classification,
            confidence=sample.confidence,
            reasoning=labelled_reasoning("AI classification", sample.reasoning),
            tier=Tier.AI_CONSENSUS,
            matching_rules=sample.matching_rules,
        )

    async def _sample(self, name: str) -> AIClassification:
        assert self._inference is not None
        inference = self._inference
        async with self._ai_slots:
            return await self._retry.run(
                lambda: inference.classify(name), operation="AI classification"
            )

    def _remember(self, name: str, result: ClassificationResult) -> ClassificationResult:
        if self._cache is not None:
            self._cache.set_if_absent(name, result)
        return result
