"""Tests for OpenAIResponsesProvider against a scripted client."""

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from workflow_assistant.core.exceptions import ToolInputValidationError, UpstreamError
from workflow_assistant.tools import ToolRegistry
from workflow_assistant.utils.providers.base import CompletionRequest
from workflow_assistant.utils.providers.openai import OpenAIResponsesProvider


def fake_response(response_id, text="", output=(), input_tokens=10, output_tokens=5):
    return SimpleNamespace(
        id=response_id,
        output=list(output),
        output_text=text,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def function_call(call_id, name, arguments):
    return SimpleNamespace(
        type="function_call",
        call_id=call_id,
        name=name,
        arguments=arguments if isinstance(arguments, str) else json.dumps(arguments),
    )


class FakeResponses:
    def __init__(self, script):
        self.script = list(script)
        self.calls = []

    async def create(self, **params):
        self.calls.append(params)
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClient:
    def __init__(self, script):
        self.responses = FakeResponses(script)
        self.api_keys = []


def make_provider(script):
    client = FakeClient(script)

    def factory(api_key):
        client.api_keys.append(api_key)
        return client

    return OpenAIResponsesProvider(client_factory=factory), client


def make_request(**overrides):
    values = {
        "system": "You are helpful.",
        "user_message": "What is 2+2?",
        "model": "gpt-4.1",
        "api_key": "sk-test",
        "metadata": {"chatId": "chat-1", "userId": "user-1"},
    }
    values.update(overrides)
    return CompletionRequest(**values)


class TestComplete:
    """Tests for complete()."""

    @pytest.mark.asyncio
    async def test_fresh_thread_omits_previous_response_id(self):
        """Test no handle means no previous_response_id parameter."""
        provider, client = make_provider([fake_response("resp_1", text="4")])

        response = await provider.complete(make_request())

        params = client.responses.calls[0]
        assert "previous_response_id" not in params
        assert params["store"] is True
        assert params["metadata"] == {"chatId": "chat-1", "userId": "user-1"}
        assert params["instructions"] == "You are helpful."
        assert params["input"] == "What is 2+2?"
        assert client.api_keys == ["sk-test"]

        assert response.text == "4"
        assert response.response_id == "resp_1"
        assert response.usage.input_tokens == 10
        assert response.usage.output_tokens == 5
        assert response.tool_calls == []

    @pytest.mark.asyncio
    async def test_chained_request(self):
        """Test the handle is forwarded when present."""
        provider, client = make_provider([fake_response("resp_2", text="Yes")])

        await provider.complete(make_request(previous_response_id="resp_1"))

        assert client.responses.calls[0]["previous_response_id"] == "resp_1"

    @pytest.mark.asyncio
    async def test_tool_loop(self):
        """Test tool calls are executed and fed back on the chain."""
        provider, client = make_provider(
            [
                fake_response(
                    "resp_1",
                    output=[function_call("call_1", "remove_stage", {"stageIndex": 1})],
                    input_tokens=100,
                    output_tokens=20,
                ),
                fake_response("resp_2", text="Removed it.", input_tokens=150, output_tokens=10),
            ]
        )
        tools = ToolRegistry().for_mode("workflow")

        response = await provider.complete(make_request(tools=tools))

        first, second = client.responses.calls
        assert [t["name"] for t in first["tools"]][:2] == ["create_workflow", "add_stage"]
        assert second["previous_response_id"] == "resp_1"
        assert second["input"][0]["type"] == "function_call_output"
        assert second["input"][0]["call_id"] == "call_1"
        assert json.loads(second["input"][0]["output"])["stageIndex"] == 1

        assert response.text == "Removed it."
        assert response.response_id == "resp_2"
        assert response.usage.input_tokens == 250
        assert response.usage.output_tokens == 30
        assert [c.tool_name for c in response.tool_calls] == ["remove_stage"]

        assistant_turn, tool_turn = response.response_messages
        assert assistant_turn["role"] == "assistant"
        assert assistant_turn["content"][0]["type"] == "tool-call"
        assert tool_turn["role"] == "tool"
        result = tool_turn["content"][0]
        assert result["type"] == "tool-result"
        assert result["toolCallId"] == "call_1"
        assert result["output"]["type"] == "json"
        assert result["output"]["value"]["action"] == "remove_stage"

    @pytest.mark.asyncio
    async def test_step_limit(self):
        """Test the loop stops after max_steps model calls."""
        call = function_call("call_x", "remove_stage", {"stageIndex": 0})
        provider, client = make_provider(
            [fake_response(f"resp_{i}", output=[call]) for i in range(1, 4)]
        )

        response = await provider.complete(
            make_request(tools=ToolRegistry().for_mode("workflow"), max_steps=2)
        )

        assert len(client.responses.calls) == 2
        assert response.response_id == "resp_2"

    @pytest.mark.asyncio
    async def test_invalid_tool_arguments(self):
        """Test schema violations raise ToolInputValidationError."""
        provider, _ = make_provider(
            [fake_response("resp_1", output=[function_call("call_1", "remove_stage", {})])]
        )

        with pytest.raises(ToolInputValidationError) as exc_info:
            await provider.complete(make_request(tools=ToolRegistry().for_mode("workflow")))

        assert exc_info.value.tool_name == "remove_stage"

    @pytest.mark.asyncio
    async def test_unknown_tool_reports_error(self):
        """Test a call to an unoffered tool returns an error output."""
        provider, _ = make_provider(
            [
                fake_response("resp_1", output=[function_call("call_1", "delete_everything", {})]),
                fake_response("resp_2", text="Sorry."),
            ]
        )

        response = await provider.complete(make_request(tools=[]))

        value = response.response_messages[1]["content"][0]["output"]["value"]
        assert value["action"] == "error"
        assert value["error"] == "Unknown tool: delete_everything"

    @pytest.mark.asyncio
    async def test_bad_request_wrapped(self):
        """Test a 400 from the API becomes UpstreamError."""
        request = httpx.Request("POST", "https://api.openai.com/v1/responses")
        error = openai.BadRequestError(
            "Previous response not found",
            response=httpx.Response(400, request=request),
            body=None,
        )
        provider, _ = make_provider([error])

        with pytest.raises(UpstreamError) as exc_info:
            await provider.complete(make_request(previous_response_id="resp_gone"))

        assert exc_info.value.status_code == 400
        assert "Previous response not found" in str(exc_info.value)


class TestSummarize:
    """Tests for summarize()."""

    @pytest.mark.asyncio
    async def test_plain_text_call(self):
        """Test summaries are tool-free and not stored."""
        provider, client = make_provider([fake_response("resp_s", text="Summary.")])

        text = await provider.summarize("Summarize.", "[]", "gpt-4o-mini", "sk-test")

        params = client.responses.calls[0]
        assert text == "Summary."
        assert params["model"] == "gpt-4o-mini"
        assert params["store"] is False
        assert "tools" not in params
