"""Merge original rows with per-row classification results."""

import logging
from collections.abc import Sequence
from typing import Any

from payee_ml.data_models import (
    KeywordExclusion,
    PayeeClassification,
    PerRowResult,
    RowStatus,
)
from payee_ml.exceptions import AlignmentError

logger = logging.getLogger(__name__)

ALIGNED_STATUS = "Perfect 1:1 Match"
NO_ORIGINAL_DATA_STATUS = "No Original Data"
FAILED_TIER = "Failed"
NO_EXCLUSION_REASON = "No keyword exclusion applied"

EXPORT_COLUMNS = (
    "AI_Classification",
    "AI_Confidence_%",
    "AI_Processing_Tier",
    "AI_Reasoning",
    "Keyword_Exclusion",
    "Matched_Keywords",
    "Keyword_Confidence_%",
    "Keyword_Reasoning",
    "Matching_Rules",
    "Processing_Row_Index",
    "Data_Alignment_Status",
    "Classification_Timestamp",
)


def row_results_from_classifications(
    classifications: Sequence[PayeeClassification],
) -> list[PerRowResult]:
    """Convert synchronous batch output into per-row results."""
    return [
        PerRowResult(
            row_index=c.row_index,
            status=RowStatus.SUCCESS,
            payee_name=c.payee_name,
            classification=c.result.classification,
            confidence=c.result.confidence,
            reasoning=c.result.reasoning,
            tier=c.result.tier,
            matching_rules=c.result.matching_rules,
            timestamp=c.timestamp,
            keyword_exclusion=c.result.keyword_exclusion,
        )
        for c in classifications
    ]


class ResultAligner:
    """Build export rows, one per input row, in input order.

    With original rows (strict): lengths must match and every result must
    declare the row index equal to its position, otherwise AlignmentError.
    Nothing is emitted for a misaligned batch.

    Without original rows (lenient): one row of classification fields per
    result, in the order given.
    """

    def merge(
        self,
        original_rows: Sequence[dict[str, Any]] | None,
        results: Sequence[PerRowResult],
    ) -> list[dict[str, Any]]:
        if original_rows is None:
            return [
                {
                    "Payee_Name": result.payee_name or "",
                    **self._fields(result, NO_ORIGINAL_DATA_STATUS),
                }
                for result in results
            ]

        if len(original_rows) != len(results):
            raise AlignmentError(
                f"Cannot merge {len(results)} results into {len(original_rows)} rows",
                {"rows": len(original_rows), "results": len(results)},
            )

        merged: list[dict[str, Any]] = []
        for position, (row, result) in enumerate(zip(original_rows, results)):
            if result.row_index != position:
                logger.error(
                    "Alignment violation: position %d holds result for row %d",
                    position,
                    result.row_index,
                )
                raise AlignmentError(
                    f"Result at position {position} declares row {result.row_index}",
                    {"position": position, "row_index": result.row_index},
                )
            merged.append({**row, **self._fields(result, ALIGNED_STATUS)})

        logger.info("Merged %d rows with classification results", len(merged))
        return merged

    @staticmethod
    def _fields(result: PerRowResult, alignment_status: str) -> dict[str, Any]:
        failed = result.status is RowStatus.FAILED
        if result.tier is not None:
            tier = result.tier.value
        else:
            tier = FAILED_TIER if failed else ""
        return {
            "AI_Classification": (
                result.classification.value if result.classification else ""
            ),
            "AI_Confidence_%": result.confidence if result.confidence is not None else "",
            "AI_Processing_Tier": tier,
            "AI_Reasoning": result.reasoning or "",
            **_exclusion_fields(result.keyword_exclusion),
            "Matching_Rules": "; ".join(result.matching_rules),
            "Processing_Row_Index": result.row_index,
            "Data_Alignment_Status": alignment_status,
            "Classification_Timestamp": (
                result.timestamp.isoformat() if result.timestamp else ""
            ),
        }


def _exclusion_fields(exclusion: KeywordExclusion | None) -> dict[str, Any]:
    if exclusion is None:
        return {
            "Keyword_Exclusion": "No",
            "Matched_Keywords": "",
            "Keyword_Confidence_%": 0,
            "Keyword_Reasoning": NO_EXCLUSION_REASON,
        }
    return {
        "Keyword_Exclusion": "Yes" if exclusion.is_excluded else "No",
        "Matched_Keywords": "; ".join(exclusion.matched_keywords),
        "Keyword_Confidence_%": exclusion.confidence,
        "Keyword_Reasoning": exclusion.reasoning,
    }
