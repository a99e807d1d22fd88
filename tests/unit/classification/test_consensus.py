"""Tests for consensus voting over AI samples."""

import pytest

from payee_ml.data_models import PayeeType, Tier
from payee_ml.exceptions import AllSamplesFailed, AuthError, TransientUpstreamError
from payee_ml.inference.classification import ConsensusVoter
from tests.fakes import ScriptedInference, ai

B, I = PayeeType.BUSINESS, PayeeType.INDIVIDUAL


class TestAggregate:
    def test_majority_and_scaled_confidence(self) -> None:
        result = ConsensusVoter.aggregate(
            [ai(B, 90, "suffix"), ai(I, 80), ai(B, 70)]
        )

        assert result.classification is B
        # median_high(90, 70) = 90, scaled by 2/3
        assert result.confidence == 60
        assert result.tier is Tier.AI_CONSENSUS
        assert result.reasoning == "Consensus classification (67% agreement): suffix"

    def test_unanimous(self) -> None:
        result = ConsensusVoter.aggregate([ai(I, 88), ai(I, 92), ai(I, 90)])
        assert result.classification is I
        assert result.confidence == 90
        assert result.reasoning.startswith("Consensus classification (100% agreement)")

    def test_tie_goes_to_individual(self) -> None:
        result = ConsensusVoter.aggregate([ai(B, 95), ai(I, 60)])

        assert result.classification is I
        assert result.confidence == 30

    def test_rules_union_in_first_seen_order(self) -> None:
        result = ConsensusVoter.aggregate(
            [ai(B, 90, rules=["a", "b"]), ai(B, 90, rules=["b", "c"]), ai(I, 50, rules=["d"])]
        )
        assert result.matching_rules == ["a", "b", "c", "d"]


class TestVote:
    @pytest.mark.asyncio
    async def test_runs_requested_samples(self) -> None:
        client = ScriptedInference(ai(B, 90), ai(B, 80), ai(I, 70))
        result = await ConsensusVoter(client.classify).vote("Acme", runs=3)

        assert len(client.calls) == 3
        assert result.classification is B

    @pytest.mark.asyncio
    async def test_failed_samples_are_dropped(self) -> None:
        client = ScriptedInference(ai(B, 90), TransientUpstreamError("down"), ai(B, 80))
        result = await ConsensusVoter(client.classify).vote("Acme", runs=3)

        assert result.classification is B
        # Ratio over the two successful votes
        assert result.confidence == 90

    @pytest.mark.asyncio
    async def test_all_failed(self) -> None:
        client = ScriptedInference(TransientUpstreamError("down"))

        with pytest.raises(AllSamplesFailed):
            await ConsensusVoter(client.classify).vote("Acme", runs=3)

    @pytest.mark.asyncio
    async def test_all_failed_with_auth_error(self) -> None:
        client = ScriptedInference(AuthError(), TransientUpstreamError("down"))

        with pytest.raises(AuthError):
            await ConsensusVoter(client.classify).vote("Acme", runs=2)
