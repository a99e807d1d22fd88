"""Batch request identifiers.

Each sub-request of a batch job carries ``payee-{row}-{position}``: the
origin row of the name and its position in the uploaded request file.
Changing this format breaks result reconstruction for jobs already in
flight.
"""

import re

from payee_ml.exceptions import ValidationError

CUSTOM_ID_PATTERN = re.compile(r"^payee-(\d+)-(\d+)$")

JOB_ID_PREFIX = "batch_"
MIN_JOB_ID_LENGTH = 15


def make_custom_id(row_index: int, position: int) -> str:
    if row_index < 0 or position < 0:
        raise ValueError(f"Negative index in custom id: {row_index}, {position}")
    return f"payee-{row_index}-{position}"


def parse_custom_id(custom_id: object) -> tuple[int, int] | None:
    """(row_index, position), or None if ``custom_id`` is not ours."""
    if not isinstance(custom_id, str):
        return None
    match = CUSTOM_ID_PATTERN.match(custom_id.strip())
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def validate_job_id(job_id: str) -> str:
    """Reject ids that cannot belong to the batch API."""
    if (
        not isinstance(job_id, str)
        or not job_id.startswith(JOB_ID_PREFIX)
        or len(job_id) < MIN_JOB_ID_LENGTH
    ):
        raise ValidationError(
            f"Invalid batch job id: {job_id!r}",
            details={"job_id": job_id},
        )
    return job_id
