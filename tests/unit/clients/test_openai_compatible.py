"""Tests for OpenAICompatibleClient."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from payee_ml.data_models import PayeeType
from payee_ml.exceptions import (
    AuthError,
    ParseError,
    RateLimitError,
    TransientUpstreamError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)
from payee_ml.inference.clients import OpenAICompatibleClient

BASE_URL = "http://llm.test/v1"

Handler = Callable[[httpx.Request], httpx.Response]


def make_client(
    handler: Handler, api_key: str | None = "sk-test"
) -> OpenAICompatibleClient:
    return OpenAICompatibleClient(
        api_key=api_key,
        base_url=BASE_URL + "/",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


def chat_response(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def client() -> OpenAICompatibleClient:
    return make_client(lambda request: httpx.Response(500))


class TestResponseParsing:
    """Tests for model answer parsing."""

    def test_plain_json(self, client: OpenAICompatibleClient) -> None:
        answer = client._parse_response(
            '{"classification": "Business", "confidence": 92, '
            '"reasoning": "Legal suffix", "matchingRules": ["LLC"]}'
        )

        assert answer.classification is PayeeType.BUSINESS
        assert answer.confidence == 92
        assert answer.reasoning == "Legal suffix"
        assert answer.matching_rules == ["LLC"]

    def test_json_in_code_block(self, client: OpenAICompatibleClient) -> None:
        answer = client._parse_response(
            'Here you go:\n```json\n{"classification": "individual", '
            '"confidence": 80, "reasoning": "Given and family name"}\n```'
        )

        assert answer.classification is PayeeType.INDIVIDUAL
        assert answer.confidence == 80

    def test_json_embedded_in_prose(self, client: OpenAICompatibleClient) -> None:
        answer = client._parse_response(
            'Sure! {"classification": "Business", "confidence": 70, '
            '"reason": "Store"} Hope that helps.'
        )

        assert answer.classification is PayeeType.BUSINESS
        assert answer.reasoning == "Store"

    @pytest.mark.parametrize(("raw", "expected"), [(150, 100), (-3, 0), (87.6, 88)])
    def test_confidence_clamped(
        self, client: OpenAICompatibleClient, raw: float, expected: int
    ) -> None:
        answer = client._parse_response(
            json.dumps({"classification": "Business", "confidence": raw})
        )

        assert answer.confidence == expected

    def test_snake_case_rules_and_scalar_rule(
        self, client: OpenAICompatibleClient
    ) -> None:
        answer = client._parse_response(
            json.dumps(
                {"classification": "Business", "confidence": 90, "matching_rules": "Inc"}
            )
        )

        assert answer.matching_rules == ["Inc"]

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "I think it is a business",
            '{"classification": "Robot", "confidence": 90}',
            '{"confidence": 90}',
            '{"classification": "Business", "confidence": "very"}',
            '{"classification": "Business", "confidence": NaN}',
            '{"classification": "Business", "confidence": "Infinity"}',
        ],
    )
    def test_unusable_answers(self, client: OpenAICompatibleClient, text: str) -> None:
        with pytest.raises(ParseError):
            client._parse_response(text)


class TestClassify:
    @pytest.mark.asyncio
    async def test_request_and_answer(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return chat_response(
                '{"classification": "Business", "confidence": 95, "reasoning": "Inc"}'
            )

        answer = await make_client(handler).classify("Acme Inc")

        assert answer.classification is PayeeType.BUSINESS
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "test-model"
        assert body["response_format"] == {"type": "json_object"}
        assert 'Classify this payee name: "Acme Inc"' in body["messages"][-1]["content"]

    @pytest.mark.asyncio
    async def test_no_key_no_auth_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return chat_response('{"classification": "Business", "confidence": 95}')

        await make_client(handler, api_key=None).classify("Acme Inc")

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_missing_content(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"choices": []}))

        with pytest.raises(ParseError):
            await client.classify("Acme Inc")

    @pytest.mark.asyncio
    async def test_non_text_content(self) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200, json={"choices": [{"message": {"content": {"a": 1}}}]}
            )
        )

        with pytest.raises(ParseError):
            await client.classify("Acme Inc")

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ParseError):
            await client.classify("Acme Inc")


class TestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (401, AuthError),
            (403, AuthError),
            (408, TransientUpstreamError),
            (500, TransientUpstreamError),
            (503, TransientUpstreamError),
            (400, UpstreamRequestError),
            (404, UpstreamRequestError),
        ],
    )
    async def test_status_codes(self, status: int, error: type[Exception]) -> None:
        client = make_client(lambda request: httpx.Response(status))

        with pytest.raises(error) as exc_info:
            await client.classify("Acme Inc")
        assert exc_info.value.details["status"] == status  # type: ignore[attr-defined]

    @pytest.mark.asyncio
    async def test_error_message_from_body(self) -> None:
        client = make_client(
            lambda request: httpx.Response(
                400, json={"error": {"message": "model not found"}}
            )
        )

        with pytest.raises(UpstreamRequestError, match="model not found"):
            await client.classify("Acme Inc")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("header", "expected"), [("7", 7.0), ("soon", None)])
    async def test_rate_limit_retry_after(
        self, header: str, expected: float | None
    ) -> None:
        client = make_client(
            lambda request: httpx.Response(429, headers={"Retry-After": header})
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client.classify("Acme Inc")
        assert exc_info.value.retry_after == expected

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("Request timed out", request=request)

        with pytest.raises(UpstreamTimeoutError):
            await make_client(handler).classify("Acme Inc")

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(TransientUpstreamError, match="Could not reach"):
            await make_client(handler).classify("Acme Inc")


class TestBatchApi:
    def test_build_batch_line(self, client: OpenAICompatibleClient) -> None:
        line = client.build_batch_line("payee-3-0", "Jane Doe")

        assert line["custom_id"] == "payee-3-0"
        assert line["method"] == "POST"
        assert line["url"] == "/v1/chat/completions"
        assert line["body"]["model"] == "test-model"

    def test_parse_batch_line(self, client: OpenAICompatibleClient) -> None:
        answer = client.parse_batch_line(
            {
                "custom_id": "payee-3-0",
                "response": {
                    "status_code": 200,
                    "body": {
                        "choices": [
                            {
                                "message": {
                                    "content": '{"classification": "Individual", '
                                    '"confidence": 88}'
                                }
                            }
                        ]
                    },
                },
                "error": None,
            }
        )

        assert answer.classification is PayeeType.INDIVIDUAL
        assert answer.confidence == 88

    @pytest.mark.parametrize(
        "record",
        [
            {"custom_id": "payee-0-0", "error": {"message": "expired"}},
            {"custom_id": "payee-0-0", "response": {"status_code": 429, "body": {}}},
            {"custom_id": "payee-0-0", "response": {"status_code": 200, "body": {}}},
            {"custom_id": "payee-0-0", "response": "oops"},
            {
                "custom_id": "payee-0-0",
                "response": {
                    "status_code": 200,
                    "body": {"choices": [{"message": {"content": ["a"]}}]},
                },
            },
            {"custom_id": "payee-0-0"},
        ],
    )
    def test_unusable_batch_lines(
        self, client: OpenAICompatibleClient, record: dict[str, Any]
    ) -> None:
        with pytest.raises(ParseError):
            client.parse_batch_line(record)

    @pytest.mark.asyncio
    async def test_upload_without_file_id(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"object": "file"}))

        with pytest.raises(ParseError):
            await client.upload_batch_file(b"{}")

    @pytest.mark.asyncio
    async def test_endpoints(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            path = request.url.path
            if path.endswith("/content"):
                return httpx.Response(200, text='{"custom_id": "payee-0-0"}\n')
            if path == "/v1/files":
                return httpx.Response(200, json={"id": "file-abc"})
            return httpx.Response(
                200, json={"id": "batch_abc123def456", "status": "validating"}
            )

        client = make_client(handler)

        file_id = await client.upload_batch_file(b'{"custom_id": "payee-0-0"}')
        created = await client.create_batch(file_id, {"deduplicated": "true"})
        await client.retrieve_batch("batch_abc123def456")
        await client.cancel_batch("batch_abc123def456")
        text = await client.download_file("file-out")

        assert file_id == "file-abc"
        assert created["status"] == "validating"
        assert text == '{"custom_id": "payee-0-0"}\n'
        assert [(r.method, r.url.path) for r in seen] == [
            ("POST", "/v1/files"),
            ("POST", "/v1/batches"),
            ("GET", "/v1/batches/batch_abc123def456"),
            ("POST", "/v1/batches/batch_abc123def456/cancel"),
            ("GET", "/v1/files/file-out/content"),
        ]
        assert b'name="purpose"' in seen[0].content
        assert b"payees.jsonl" in seen[0].content
        create_body = json.loads(seen[1].content)
        assert create_body == {
            "input_file_id": "file-abc",
            "endpoint": "/v1/chat/completions",
            "completion_window": "24h",
            "metadata": {"deduplicated": "true"},
        }
