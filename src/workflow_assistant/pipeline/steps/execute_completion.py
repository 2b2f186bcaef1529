import json
from typing import Any

from workflow_assistant.config.prompts import ACTION_COMPLETED_REPLY, VALIDATION_ERROR_REPLY
from workflow_assistant.config.settings import Settings
from workflow_assistant.core.exceptions import (
    PipelineIncompleteError,
    ToolInputValidationError,
    UpstreamError,
)
from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.pipeline.result import CompletionResult
from workflow_assistant.utils.logging import get_logger
from workflow_assistant.utils.providers.base import (
    BaseCompletionProvider,
    CompletionRequest,
    CompletionResponse,
)

logger = get_logger(__name__)

VALIDATION_MARKERS = ("Invalid value", "validation")


def extract_tool_results(response_messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Tool-result parts with a non-empty output value, in order."""
    results = []
    for message in response_messages:
        if message.get("role") != "tool" or not isinstance(message.get("content"), list):
            continue
        for part in message["content"]:
            if part.get("type") == "tool-result" and (part.get("output") or {}).get("value"):
                results.append(part)
    return results


def synthesize_reply(tool_results: list[dict[str, Any]]) -> str:
    """Reply text built from tool outputs when the model produced none."""
    lines = []
    for part in tool_results:
        value = part["output"]["value"]
        if not isinstance(value, dict):
            continue
        if "error" in value:
            error = value["error"]
            lines.append(f"Error: {error if isinstance(error, str) else json.dumps(error, indent=2)}")
        elif "message" in value:
            lines.append(str(value["message"]))

    return "\n\n".join(lines) if lines else ACTION_COMPLETED_REPLY


class ExecuteCompletionStep(PipelineStep):
    """Calls the completion provider and shapes its response."""

    name = "ExecuteCompletion"

    def __init__(self, provider: BaseCompletionProvider, settings: Settings):
        self._provider = provider
        self._settings = settings

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if not context.system_prompt or not context.user_content:
            raise PipelineIncompleteError("System prompt and user content are required")
        if not context.chat_id:
            raise PipelineIncompleteError("Chat ID is required")

        request = CompletionRequest(
            system=context.system_prompt,
            user_message=context.user_content,
            model=self._settings.completion_model,
            api_key=context.api_key,
            tools=list(context.tools),
            previous_response_id=context.previous_response_id,
            store=True,
            metadata={"chatId": context.chat_id, "userId": context.user_id},
            max_steps=self._settings.max_tool_steps,
        )

        try:
            response = await self._provider.complete(request)
        except ToolInputValidationError as e:
            return self._recover(context, e)
        except UpstreamError as e:
            if not any(marker in str(e) for marker in VALIDATION_MARKERS):
                raise
            return self._recover(context, e)

        return context.extend(
            completion_result=self._to_result(response),
            response_id=response.response_id,
        )

    @staticmethod
    def _recover(context: PipelineContext, error: Exception) -> PipelineContext:
        logger.warning("tool_validation_failed", chat_id=context.chat_id, error=str(error))
        return context.extend(
            completion_result=CompletionResult(text=VALIDATION_ERROR_REPLY.format(error=error)),
            response_id=None,
        )

    @staticmethod
    def _to_result(response: CompletionResponse) -> CompletionResult:
        tool_results = extract_tool_results(response.response_messages)

        if response.text is not None and not isinstance(response.text, str):
            text = json.dumps(response.text, indent=2)
        else:
            text = response.text or ""

        if not text and tool_results:
            text = synthesize_reply(tool_results)

        return CompletionResult(
            text=text,
            tool_calls=[
                {"toolCallId": c.tool_call_id, "toolName": c.tool_name, "input": c.input}
                for c in response.tool_calls
            ],
            tool_results=tool_results,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
