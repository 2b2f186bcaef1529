"""Lists the user's mini-prompt library so the model can reuse entries."""

from workflow_assistant.context.types import ContextProvider, ContextRequest, ContextSection

MAX_LISTED_MINI_PROMPTS = 20
LIBRARY_PRIORITY = 4


class MiniPromptLibraryProvider(ContextProvider):
    def __init__(self, max_listed: int = MAX_LISTED_MINI_PROMPTS):
        self.max_listed = max_listed

    def should_provide(self, request: ContextRequest) -> bool:
        ctx = request.workflow_context
        return ctx is not None and len(ctx.available_mini_prompts) > 0

    async def build_context(self, request: ContextRequest) -> ContextSection | None:
        ctx = request.workflow_context
        if ctx is None or not ctx.available_mini_prompts:
            return None

        prompts = ctx.available_mini_prompts
        lines = ["## Available Mini-Prompts in Library", ""]
        for mp in prompts[: self.max_listed]:
            entry = f"- **{mp.name}** (ID: {mp.id})"
            if mp.description:
                entry += f": {mp.description}"
            lines.append(entry)

        # Truncated listing
        remaining = len(prompts) - self.max_listed
        if remaining > 0:
            lines.append(f"_...and {remaining} more_")

        return ContextSection(content="\n".join(lines), priority=LIBRARY_PRIORITY)
