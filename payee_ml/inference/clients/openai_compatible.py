"""OpenAI-compatible inference adapter.

Implements both the single-name classification interface (chat completions)
and the asynchronous batch interface (files + batches endpoints) over httpx.
Any server speaking the same REST dialect works; only the base URL changes.
"""

import json
import logging
import math
import re
from typing import Any

import httpx

from payee_ml.data_models import PayeeType, clamp_confidence
from payee_ml.exceptions import (
    AuthError,
    ParseError,
    RateLimitError,
    TransientUpstreamError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)

from .port import AIClassification, BatchInferenceClient, InferenceClient
from .prompts import build_messages

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

_LABELS = {"business": PayeeType.BUSINESS, "individual": PayeeType.INDIVIDUAL}


class OpenAICompatibleClient(InferenceClient, BatchInferenceClient):
    """
    Payee classifier backed by an OpenAI-compatible REST endpoint.

    Every HTTP failure is translated into the package's upstream error
    types so retry policies can tell transient problems from fatal ones.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
        status_timeout: float = 30.0,
        completion_window: str = "24h",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout
        self._status_timeout = status_timeout
        self._completion_window = completion_window
        self._transport = transport

    @property
    def model_name(self) -> str:
        return self._model

    # Single-name classification

    async def classify(self, name: str) -> AIClassification:
        payload = self._chat_payload(name)
        logger.debug("AI request for %r", name)

        response = await self._request(
            "POST", "/chat/completions", timeout=self._timeout, json=payload
        )
        data = self._json(response)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseError(
                "Chat completion response has no message content",
                {"body": str(data)[:200]},
            ) from e

        logger.debug("AI response for %r: %s", name, content)
        return self._parse_response(_message_text(content))

    def _chat_payload(self, name: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": build_messages(name),
            "response_format": {"type": "json_object"},
            "temperature": 0.1,  # Low temperature for consistent output
            "max_tokens": 200,
        }

    # Batch API

    def build_batch_line(self, custom_id: str, name: str) -> dict[str, Any]:
        return {
            "custom_id": custom_id,
            "method": "POST",
            "url": CHAT_COMPLETIONS_PATH,
            "body": self._chat_payload(name),
        }

    def parse_batch_line(self, record: dict[str, Any]) -> AIClassification:
        if record.get("error"):
            raise ParseError(
                f"Batch request failed: {record['error']}",
                {"custom_id": record.get("custom_id")},
            )
        response = record.get("response") or {}
        if not isinstance(response, dict):
            raise ParseError(
                "Batch output line has a malformed response",
                {"custom_id": record.get("custom_id")},
            )
        status_code = response.get("status_code", 200)
        if status_code != 200:
            raise ParseError(
                f"Batch request returned HTTP {status_code}",
                {"custom_id": record.get("custom_id")},
            )
        try:
            content = response["body"]["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseError(
                "Batch output line has no message content",
                {"custom_id": record.get("custom_id")},
            ) from e
        return self._parse_response(_message_text(content))

    async def upload_batch_file(self, content: bytes) -> str:
        response = await self._request(
            "POST",
            "/files",
            timeout=self._timeout,
            files={"file": ("payees.jsonl", content, "application/jsonl")},
            data={"purpose": "batch"},
        )
        data = self._json(response)
        if not data.get("id"):
            raise ParseError(
                "File upload reply has no file id", {"body": str(data)[:200]}
            )
        return str(data["id"])

    async def create_batch(
        self, input_file_id: str, metadata: dict[str, str]
    ) -> dict[str, Any]:
        response = await self._request(
            "POST",
            "/batches",
            timeout=self._timeout,
            json={
                "input_file_id": input_file_id,
                "endpoint": CHAT_COMPLETIONS_PATH,
                "completion_window": self._completion_window,
                "metadata": metadata,
            },
        )
        return self._json(response)

    async def retrieve_batch(self, job_id: str) -> dict[str, Any]:
        response = await self._request(
            "GET", f"/batches/{job_id}", timeout=self._status_timeout
        )
        return self._json(response)

    async def cancel_batch(self, job_id: str) -> dict[str, Any]:
        response = await self._request(
            "POST", f"/batches/{job_id}/cancel", timeout=self._status_timeout
        )
        return self._json(response)

    async def download_file(self, file_id: str) -> str:
        response = await self._request(
            "GET", f"/files/{file_id}/content", timeout=self._status_timeout
        )
        return response.text

    # HTTP plumbing

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _request(
        self, method: str, path: str, *, timeout: float, **kwargs: Any
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        http_timeout = httpx.Timeout(timeout, connect=min(timeout, 10.0))
        try:
            async with httpx.AsyncClient(
                timeout=http_timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"{method} {path} timed out after {timeout:.1f}s"
            ) from e
        except httpx.TransportError as e:
            raise TransientUpstreamError(
                f"Could not reach inference endpoint at {self._base_url}: "
                f"{str(e) or type(e).__name__}"
            ) from e

        self._raise_for_status(response, method, path)
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
        status = response.status_code
        if status < 400:
            return

        message = _error_message(response)
        details = {"status": status, "path": path}
        if status in (401, 403):
            raise AuthError(f"Inference endpoint rejected credentials: {message}", details)
        if status == 429:
            raise RateLimitError(
                f"Rate limited on {method} {path}: {message}",
                retry_after=_retry_after(response),
                details=details,
            )
        if status == 408 or status >= 500:
            raise TransientUpstreamError(
                f"{method} {path} failed with HTTP {status}: {message}", details
            )
        raise UpstreamRequestError(
            f"{method} {path} rejected with HTTP {status}: {message}", details
        )

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(
                "Inference endpoint returned invalid JSON",
                {"body": response.text[:200]},
            ) from e
        if not isinstance(data, dict):
            raise ParseError("Inference endpoint returned a non-object JSON body")
        return data

    # Answer parsing

    def _parse_response(self, response_text: str) -> AIClassification:
        json_data = self._extract_json(response_text)
        if json_data is None:
            raise ParseError(
                "Could not find a JSON object in the model answer",
                {"answer": response_text[:200]},
            )

        label = _LABELS.get(str(json_data.get("classification", "")).strip().lower())
        if label is None:
            raise ParseError(
                f"Unknown classification {json_data.get('classification')!r}",
                {"answer": response_text[:200]},
            )

        try:
            confidence = float(json_data.get("confidence", 50))
        except (TypeError, ValueError) as e:
            raise ParseError(
                f"Confidence is not a number: {json_data.get('confidence')!r}"
            ) from e
        if not math.isfinite(confidence):
            raise ParseError(f"Confidence is not finite: {confidence!r}")

        rules = json_data.get("matchingRules") or json_data.get("matching_rules") or []
        if not isinstance(rules, list):
            rules = [str(rules)]

        return AIClassification(
            classification=label,
            # Clamp confidence to valid range
            confidence=clamp_confidence(confidence),
            reasoning=str(json_data.get("reasoning") or json_data.get("reason") or ""),
            matching_rules=[str(r) for r in rules],
        )

    @staticmethod
    def _extract_json(text: str) -> dict | None:
        # Try to find JSON in code blocks first
        json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
        if json_match:
            try:
                return json.loads(json_match.group(1))
            except json.JSONDecodeError:
                pass

        # Whole answer (response_format=json_object) or first embedded object
        for candidate in (text.strip(), _first_object(text)):
            if not candidate:
                continue
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                return data

        return None


def _message_text(content: Any) -> str:
    if content is None:
        return ""
    if not isinstance(content, str):
        raise ParseError(
            f"Message content is not text: {type(content).__name__}",
            {"content": str(content)[:200]},
        )
    return content


def _first_object(text: str) -> str | None:
    match = re.search(r"\{.*\}", text, re.DOTALL)
    return match.group(0) if match else None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return response.reason_phrase


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
