"""Renders the workflow (and the open mini-prompt) being edited."""

from workflow_assistant.context.types import (
    ContextProvider,
    ContextRequest,
    ContextSection,
    CurrentMiniPrompt,
    WorkflowSummary,
)

WORKFLOW_PRIORITY = 5
MINI_PROMPT_FOCUS_PRIORITY = 10


class WorkflowContextProvider(ContextProvider):
    """
    Describes the current workflow structure.

    With only a mini-prompt open (no workflow), renders a focused block for
    that mini-prompt instead, at a higher priority.
    """

    def should_provide(self, request: ContextRequest) -> bool:
        ctx = request.workflow_context
        return ctx is not None and (ctx.workflow is not None or ctx.current_mini_prompt is not None)

    async def build_context(self, request: ContextRequest) -> ContextSection | None:
        ctx = request.workflow_context
        if ctx is None:
            return None

        if ctx.workflow is None:
            if ctx.current_mini_prompt is None:
                return None
            return ContextSection(
                content=self._render_focused_mini_prompt(ctx.current_mini_prompt),
                priority=MINI_PROMPT_FOCUS_PRIORITY,
            )

        content = self._render_workflow(ctx.workflow)
        if ctx.current_mini_prompt is not None:
            content += "\n\n" + self._render_viewed_mini_prompt(ctx.current_mini_prompt)

        return ContextSection(content=content, priority=WORKFLOW_PRIORITY)

    @staticmethod
    def _render_workflow(workflow: WorkflowSummary) -> str:
        lines = [
            "## Current Workflow Context",
            f"**Name**: {workflow.name}",
        ]
        if workflow.description:
            lines.append(f"**Description**: {workflow.description}")
        if workflow.complexity:
            lines.append(f"**Complexity**: {workflow.complexity}")
        lines.append(
            f"**Multi-Agent Chat**: {'Enabled' if workflow.include_multi_agent_chat else 'Disabled'}"
        )

        if workflow.stages:
            lines.extend(["", "### Stages:"])
            for stage in sorted(workflow.stages, key=lambda s: s.order):
                lines.append(f"{stage.order + 1}. **{stage.name}**")
                if stage.description:
                    lines.append(f"   _{stage.description}_")
                if stage.mini_prompts:
                    names = [
                        smp.mini_prompt.name
                        for smp in sorted(stage.mini_prompts, key=lambda m: m.order)
                    ]
                    lines.append(f"   Mini-prompts: {', '.join(names)}")

        return "\n".join(lines)

    @staticmethod
    def _render_viewed_mini_prompt(mini_prompt: CurrentMiniPrompt) -> str:
        lines = [
            "### Currently Viewing Mini-Prompt",
            f"**Name**: {mini_prompt.name}",
        ]
        if mini_prompt.description:
            lines.append(f"**Description**: {mini_prompt.description}")
        lines.extend(["", "**Content**:", "```markdown", mini_prompt.content, "```"])
        return "\n".join(lines)

    @staticmethod
    def _render_focused_mini_prompt(mini_prompt: CurrentMiniPrompt) -> str:
        lines = [
            "## Currently Viewing Mini-Prompt",
            "",
            f"**ID**: {mini_prompt.id}",
            f"**Name**: {mini_prompt.name}",
        ]
        if mini_prompt.description:
            lines.append(f"**Description**: {mini_prompt.description}")
        lines.extend(
            [
                "",
                "**Content**:",
                "```markdown",
                mini_prompt.content,
                "```",
                "",
                f'To change this mini-prompt, call modify_mini_prompt with id "{mini_prompt.id}".',
            ]
        )
        return "\n".join(lines)
