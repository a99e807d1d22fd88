"""Asynchronous batch job lifecycle."""

from .identifiers import (
    CUSTOM_ID_PATTERN,
    make_custom_id,
    parse_custom_id,
    validate_job_id,
)
from .orchestrator import MISSING_RESULT_REASON, BatchOrchestrator
from .recovery import recover_failed_rows
from .scheduler import PollingState, PollScheduler

__all__ = [
    "CUSTOM_ID_PATTERN",
    "MISSING_RESULT_REASON",
    "BatchOrchestrator",
    "PollScheduler",
    "PollingState",
    "make_custom_id",
    "parse_custom_id",
    "recover_failed_rows",
    "validate_job_id",
]
