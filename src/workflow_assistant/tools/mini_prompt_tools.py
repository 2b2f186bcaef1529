"""Mini-prompt tools."""

from workflow_assistant.tools.base import ChatTool
from workflow_assistant.tools.outputs import CreateMiniPromptOutput, ModifyMiniPromptOutput
from workflow_assistant.tools.registry import ToolRegistry
from workflow_assistant.tools.schemas import CreateMiniPromptArgs, ModifyMiniPromptArgs


@ToolRegistry.register
class CreateMiniPromptTool(ChatTool):
    name = "create_mini_prompt"
    description = (
        "Create a new standalone mini-prompt that can be reused across workflows. "
        "Use this when the user wants to create a reusable prompt template."
    )
    input_model = CreateMiniPromptArgs

    async def execute(self, args: CreateMiniPromptArgs) -> CreateMiniPromptOutput:
        return CreateMiniPromptOutput(
            mini_prompt=args,
            message=f'Mini-prompt "{args.name}" created. Review and save when ready.',
        )


@ToolRegistry.register
class ModifyMiniPromptTool(ChatTool):
    name = "modify_mini_prompt"
    description = (
        "Modify an existing mini-prompt: update name, description, or content. "
        "Identify by miniPromptId (database ID) or by stagePosition + miniPromptPosition "
        "(0-based indexes in workflow constructor)."
    )
    input_model = ModifyMiniPromptArgs

    async def execute(self, args: ModifyMiniPromptArgs) -> ModifyMiniPromptOutput:
        if args.updates.name:
            message = f'Mini-prompt "{args.updates.name}" will be updated'
        else:
            message = "Mini-prompt will be updated"

        if args.mini_prompt_id:
            message += f" (ID: {args.mini_prompt_id})"
        else:
            message += f" at stage {args.stage_position}, position {args.mini_prompt_position}"

        return ModifyMiniPromptOutput(
            mini_prompt_id=args.mini_prompt_id,
            stage_position=args.stage_position,
            mini_prompt_position=args.mini_prompt_position,
            updates=args.updates,
            message=message + ".",
        )
