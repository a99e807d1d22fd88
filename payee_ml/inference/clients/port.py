"""Inference endpoint interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from payee_ml.data_models import PayeeType


@dataclass(frozen=True)
class AIClassification:
    """One model answer for one payee name."""

    classification: PayeeType
    confidence: int
    reasoning: str
    matching_rules: list[str] = field(default_factory=list)


class InferenceClient(ABC):
    """Abstract interface for synchronous single-name classification."""

    @abstractmethod
    async def classify(self, name: str) -> AIClassification:
        """
        Classify one payee name with the model.

        Implementations raise instead of returning partial answers so the
        caller can retry or degrade.

        Parameters
        ----------
        name
            Raw payee name

        Returns
        -------
        AIClassification with label, confidence (0-100) and reasoning.

        Raises
        ------
        AuthError, RateLimitError, UpstreamTimeoutError,
        TransientUpstreamError, UpstreamRequestError, ParseError
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """
        Name/identifier of the model being used.

        Returns
        -------
        Model identifier string (e.g., "gpt-4o-mini")
        """


class BatchInferenceClient(ABC):
    """Abstract interface for the asynchronous batch API."""

    @abstractmethod
    def build_batch_line(self, custom_id: str, name: str) -> dict[str, Any]:
        """
        Build one request line of a batch input file.

        Parameters
        ----------
        custom_id
            Identifier echoed back on the matching output line
        name
            Raw payee name

        Returns
        -------
        JSON-serializable request object.
        """

    @abstractmethod
    def parse_batch_line(self, record: dict[str, Any]) -> AIClassification:
        """
        Parse the model answer out of one batch output line.

        Raises
        ------
        ParseError if the line carries an error or an unreadable answer.
        """

    @abstractmethod
    async def upload_batch_file(self, content: bytes) -> str:
        """Upload a JSONL request file. Returns the file id."""

    @abstractmethod
    async def create_batch(
        self, input_file_id: str, metadata: dict[str, str]
    ) -> dict[str, Any]:
        """Create a batch job from an uploaded file. Returns the raw job."""

    @abstractmethod
    async def retrieve_batch(self, job_id: str) -> dict[str, Any]:
        """Fetch the current state of a batch job."""

    @abstractmethod
    async def cancel_batch(self, job_id: str) -> dict[str, Any]:
        """Request cancellation of a batch job."""

    @abstractmethod
    async def download_file(self, file_id: str) -> str:
        """Download a file's content as text."""
