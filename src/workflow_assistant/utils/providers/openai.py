"""OpenAI Responses API provider with server-side conversation chaining.

Resilience patterns applied to each API call:
- Retry with exponential backoff for transient failures
- Circuit breaker to prevent cascade failures to an overloaded API
- Timeout to bound operation duration
"""

import json
from typing import Any, Callable

import openai
from openai import AsyncOpenAI

from workflow_assistant.core.exceptions import UpstreamError
from workflow_assistant.core.resilience import (
    BreakerOpen,
    MaxTimeoutExceeded,
    RateLimitError,
    TransientError,
    llm_resilient,
)
from workflow_assistant.tools.base import ChatTool
from workflow_assistant.tools.outputs import ToolErrorOutput, dump_tool_output
from workflow_assistant.utils.logging import get_logger
from workflow_assistant.utils.providers.base import (
    BaseCompletionProvider,
    CompletionRequest,
    CompletionResponse,
    ToolCall,
    Usage,
)


logger = get_logger(__name__)


def _default_client_factory(api_key: str) -> AsyncOpenAI:
    # Retries are handled by the resilience stack
    return AsyncOpenAI(api_key=api_key, max_retries=0)


class OpenAIResponsesProvider(BaseCompletionProvider):
    """
    Completion provider backed by ``client.responses.create``.

    Features:
    - ``previous_response_id`` chaining (omitted when there is no handle)
    - Tool loop bounded by ``max_steps`` model calls
    - Usage summed across every call of the loop
    """

    def __init__(self, client_factory: Callable[[str], AsyncOpenAI] | None = None):
        """
        Args:
            client_factory: Builds a client for an API key (callers bring their own key)
        """
        self._client_factory = client_factory or _default_client_factory

    @property
    def provider_name(self) -> str:
        return "openai"

    @llm_resilient
    async def _create(self, client: AsyncOpenAI, **params: Any) -> Any:
        return await client.responses.create(**params)

    async def _call(self, client: AsyncOpenAI, **params: Any) -> Any:
        """One API call with errors mapped onto UpstreamError."""
        try:
            return await self._create(client, **params)
        except (TransientError, RateLimitError, BreakerOpen, MaxTimeoutExceeded) as e:
            raise UpstreamError(f"OpenAI unavailable: {e}", recoverable=True) from e
        except openai.APIStatusError as e:
            raise UpstreamError(e.message, status_code=e.status_code) from e

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """
        Run one turn through the Responses API, executing tool calls locally.

        Raises:
            ToolInputValidationError: Tool arguments failed validation
            UpstreamError: The API rejected the request or stayed unavailable
        """
        client = self._client_factory(request.api_key)
        tools_by_name = {tool.name: tool for tool in request.tools}

        params: dict[str, Any] = {
            "model": request.model,
            "instructions": request.system,
            "input": request.user_message,
            "store": request.store,
            "metadata": request.metadata,
        }
        if request.tools:
            params["tools"] = [tool.to_openai_schema() for tool in request.tools]
        if request.previous_response_id:
            params["previous_response_id"] = request.previous_response_id

        logger.debug(
            "openai_request",
            model=request.model,
            chained=request.previous_response_id is not None,
            tools=len(request.tools),
            system_length=len(request.system),
            message_length=len(request.user_message),
        )

        usage = Usage()
        tool_calls: list[ToolCall] = []
        response_messages: list[dict[str, Any]] = []
        response = None

        for step in range(request.max_steps):
            response = await self._call(client, **params)
            usage = usage + self._usage(response)

            function_calls = [item for item in response.output if item.type == "function_call"]
            if not function_calls:
                break

            call_parts: list[dict[str, Any]] = []
            result_parts: list[dict[str, Any]] = []
            outputs: list[dict[str, Any]] = []

            for item in function_calls:
                call, result = await self._run_tool(item, tools_by_name)
                tool_calls.append(call)
                call_parts.append(
                    {
                        "type": "tool-call",
                        "toolCallId": call.tool_call_id,
                        "toolName": call.tool_name,
                        "input": call.input,
                    }
                )
                result_parts.append(
                    {
                        "type": "tool-result",
                        "toolCallId": call.tool_call_id,
                        "toolName": call.tool_name,
                        "input": call.input,
                        "output": {"type": "json", "value": result},
                    }
                )
                outputs.append(
                    {
                        "type": "function_call_output",
                        "call_id": call.tool_call_id,
                        "output": json.dumps(result),
                    }
                )

            response_messages.append({"role": "assistant", "content": call_parts})
            response_messages.append({"role": "tool", "content": result_parts})

            # Continue the chain from the response that requested the tools
            params["input"] = outputs
            params["previous_response_id"] = response.id

            logger.debug("openai_tool_step", step=step + 1, calls=len(function_calls))

        text = response.output_text if response is not None else ""

        logger.info(
            "openai_completion",
            model=request.model,
            response_id=response.id if response is not None else None,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            tool_calls=len(tool_calls),
        )

        return CompletionResponse(
            text=text,
            tool_calls=tool_calls,
            response_messages=response_messages,
            usage=usage,
            response_id=response.id if response is not None else None,
        )

    async def _run_tool(
        self,
        item: Any,
        tools_by_name: dict[str, ChatTool],
    ) -> tuple[ToolCall, dict[str, Any]]:
        tool = tools_by_name.get(item.name)
        if tool is None:
            call = ToolCall(tool_call_id=item.call_id, tool_name=item.name, input={})
            error = ToolErrorOutput(error=f"Unknown tool: {item.name}", message="Tool not available")
            return call, dump_tool_output(error)

        args = tool.parse_input(item.arguments)
        call = ToolCall(
            tool_call_id=item.call_id,
            tool_name=tool.name,
            input=args.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        output = await tool.execute(args)
        return call, dump_tool_output(output)

    @staticmethod
    def _usage(response: Any) -> Usage:
        if response.usage is None:
            return Usage()
        return Usage(
            input_tokens=response.usage.input_tokens or 0,
            output_tokens=response.usage.output_tokens or 0,
        )

    async def summarize(self, system: str, prompt: str, model: str, api_key: str) -> str:
        client = self._client_factory(api_key)
        response = await self._call(
            client,
            model=model,
            instructions=system,
            input=prompt,
            store=False,
        )
        return response.output_text or ""
