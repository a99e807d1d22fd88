"""Majority voting over repeated AI-tier samples."""

from __future__ import annotations

import asyncio
import logging
import statistics
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from payee_ml.data_models import ClassificationResult, PayeeType, Tier
from payee_ml.exceptions import AllSamplesFailed, AuthError

if TYPE_CHECKING:
    from payee_ml.inference.clients import AIClassification

logger = logging.getLogger(__name__)

Sampler = Callable[[str], Awaitable["AIClassification"]]


class ConsensusVoter:
    """Run R independent samples concurrently and vote on the label.

    - label: Business only if it has strictly more votes than Individual,
      so an even split yields Individual
    - confidence: round(median_high(majority confidences) * majority / votes),
      counting successful samples only
    - matching rules: union over all successful samples, first-seen order

    Failed samples are dropped. If all fail, AllSamplesFailed is raised;
    an AuthError among the failures is re-raised as is.
    """

    def __init__(self, sampler: Sampler):
        self._sampler = sampler

    async def vote(self, name: str, runs: int = 3) -> ClassificationResult:
        runs = max(1, runs)
        outcomes = await asyncio.gather(
            *(self._sampler(name) for _ in range(runs)),
            return_exceptions=True,
        )

        votes: list[AIClassification] = []
        failures: list[BaseException] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                failures.append(outcome)
            else:
                votes.append(outcome)

        if failures:
            logger.debug(
                "Consensus for %r: %d/%d samples failed", name, len(failures), runs
            )
        if not votes:
            auth = next((f for f in failures if isinstance(f, AuthError)), None)
            if auth is not None:
                raise auth
            raise AllSamplesFailed(name, failures)

        return self.aggregate(votes)

    @staticmethod
    def aggregate(votes: list[AIClassification]) -> ClassificationResult:
        business = [v for v in votes if v.classification is PayeeType.BUSINESS]
        individual = [v for v in votes if v.classification is PayeeType.INDIVIDUAL]

        if len(business) > len(individual):
            label, majority = PayeeType.BUSINESS, business
        else:
            label, majority = PayeeType.INDIVIDUAL, individual

        ratio = len(majority) / len(votes)
        median = statistics.median_high(v.confidence for v in majority)
        agreement = round(ratio * 100)

        rules: dict[str, None] = {}
        for v in votes:
            rules.update(dict.fromkeys(v.matching_rules))

        summary = next((v.reasoning for v in majority if v.reasoning), "")
        reasoning = f"Consensus classification ({agreement}% agreement)"
        if summary:
            reasoning = f"{reasoning}: {summary}"

        return ClassificationResult(
            classification=label,
            confidence=round(median * ratio),
            reasoning=reasoning,
            tier=Tier.AI_CONSENSUS,
            matching_rules=list(rules),
        )
