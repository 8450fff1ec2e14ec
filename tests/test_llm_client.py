"""Tests for the Anthropic structured client and JSON extraction."""
import json
import httpx
import pytest
from app.core.errors import GenerationTimeout, GenerationUpstreamFailure
from app.core.validation import ValidationIssue
from app.llm.client import AnthropicStructuredClient, GenerationRequest
from app.llm.parsing import extract_json_object
from app.schemas.generation import GenerationHints


def _message(text: str) -> dict:
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
    }


def _client(handler) -> AnthropicStructuredClient:
    return AnthropicStructuredClient(
        api_key="test-key",
        model="test-model",
        temperature=0.2,
        transport=httpx.MockTransport(handler),
    )


def test_extract_json_object_variants():
    assert extract_json_object('{"name": "x"}') == {"name": "x"}
    assert extract_json_object('Here you go:\n```json\n{"name": "y"}\n```\nDone.') == {"name": "y"}
    assert extract_json_object('Sure! {"name": "z", "entities": []} Hope that helps.') == {"name": "z", "entities": []}
    assert extract_json_object("no json here") is None
    assert extract_json_object("[1, 2, 3]") is None
    assert extract_json_object("") is None


def test_user_message_carries_hints_and_repair_errors():
    request = GenerationRequest(
        prompt="Track cleaning jobs",
        hints=GenerationHints(industry="Home services"),
    )
    message = request.user_message()
    assert "Industry: Home services" in message
    assert "Primary use case: Not specified" in message
    assert "User request: Track cleaning jobs" in message
    assert not request.is_repair

    repair = GenerationRequest(
        prompt="Track cleaning jobs",
        repair_errors=[ValidationIssue("views[0].kind", "Unknown view kind 'gantt'")],
        previous_candidate={"name": "x"},
    )
    message = repair.user_message()
    assert repair.is_repair
    assert "views[0].kind: Unknown view kind 'gantt'" in message
    assert '"name": "x"' in message


def test_modify_request_uses_existing_config():
    request = GenerationRequest(prompt="Add a phone field", existing_config={"name": "Old CRM"})
    assert "Modifying an existing configuration" in request.system_prompt()
    assert '"name": "Old CRM"' in request.user_message()
    assert "Change request: Add a phone field" in request.user_message()


@pytest.mark.asyncio
async def test_generate_structured_success():
    """The request carries model settings and the response JSON is extracted from fenced text."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_message('```json\n{"name": "Sparkle", "entities": []}\n```'))

    result = await _client(handler).generate_structured(GenerationRequest(prompt="Cleaning business CRM"))

    assert result == {"name": "Sparkle", "entities": []}
    assert seen["headers"]["x-api-key"] == "test-key"
    assert seen["headers"]["anthropic-version"] == AnthropicStructuredClient.API_VERSION
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["temperature"] == 0.2
    assert seen["body"]["messages"][0]["role"] == "user"
    assert "CRM configuration architect" in seen["body"]["system"]


@pytest.mark.asyncio
async def test_concatenates_text_blocks():
    def handler(request: httpx.Request) -> httpx.Response:
        body = _message('{"name": ')
        body["content"].append({"type": "text", "text": '"split"}'})
        return httpx.Response(200, json=body)

    assert await _client(handler).generate_structured(GenerationRequest(prompt="p")) == {"name": "split"}


@pytest.mark.asyncio
async def test_error_status_is_upstream_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(529, json={"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}})

    with pytest.raises(GenerationUpstreamFailure) as exc_info:
        await _client(handler).generate_structured(GenerationRequest(prompt="p"))
    assert exc_info.value.status_code == 529
    assert exc_info.value.message == "Overloaded"


@pytest.mark.asyncio
async def test_response_without_json_is_upstream_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_message("I cannot help with that."))

    with pytest.raises(GenerationUpstreamFailure, match="no JSON object"):
        await _client(handler).generate_structured(GenerationRequest(prompt="p"))


@pytest.mark.asyncio
async def test_transport_timeout_is_generation_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GenerationTimeout):
        await _client(handler).generate_structured(GenerationRequest(prompt="p"))


@pytest.mark.asyncio
async def test_connection_error_is_upstream_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationUpstreamFailure):
        await _client(handler).generate_structured(GenerationRequest(prompt="p"))


@pytest.mark.asyncio
async def test_missing_api_key_is_upstream_failure():
    client = AnthropicStructuredClient(api_key="", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    with pytest.raises(GenerationUpstreamFailure, match="ANTHROPIC_API_KEY"):
        await client.generate_structured(GenerationRequest(prompt="p"))
