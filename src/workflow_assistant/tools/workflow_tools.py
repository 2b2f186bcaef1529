"""Workflow-editing tools."""

from workflow_assistant.tools.base import ChatTool
from workflow_assistant.tools.outputs import (
    AddStageOutput,
    CreateWorkflowOutput,
    RemoveStageOutput,
    UpdateWorkflowSettingsOutput,
)
from workflow_assistant.tools.registry import ToolRegistry
from workflow_assistant.tools.schemas import (
    AddStageArgs,
    CreateWorkflowArgs,
    RemoveStageArgs,
    UpdateWorkflowSettingsArgs,
)


@ToolRegistry.register
class CreateWorkflowTool(ChatTool):
    name = "create_workflow"
    description = (
        "Create or modify a complete workflow with stages and mini-prompts. "
        "Use this when the user wants to create a new workflow or make major structural changes. "
        "Returns the complete workflow structure for user approval."
    )
    input_model = CreateWorkflowArgs

    async def execute(self, args: CreateWorkflowArgs) -> CreateWorkflowOutput:
        return CreateWorkflowOutput(
            workflow=args,
            message=(
                f'Workflow "{args.name}" created with {len(args.stages)} stage(s). '
                "Review and save when ready."
            ),
        )


@ToolRegistry.register
class AddStageTool(ChatTool):
    name = "add_stage"
    description = (
        "Add a new stage to the current workflow at a specific position. "
        "Use this when the user wants to add a stage without recreating the entire workflow."
    )
    input_model = AddStageArgs

    async def execute(self, args: AddStageArgs) -> AddStageOutput:
        where = "end" if args.position == -1 else str(args.position)
        return AddStageOutput(
            stage=args,
            message=f'Stage "{args.name}" will be added at position {where}.',
        )


@ToolRegistry.register
class RemoveStageTool(ChatTool):
    name = "remove_stage"
    description = (
        "Remove a stage from the workflow by its index. "
        "Use this when the user wants to delete a stage."
    )
    input_model = RemoveStageArgs

    async def execute(self, args: RemoveStageArgs) -> RemoveStageOutput:
        return RemoveStageOutput(
            stage_index=args.stage_index,
            message=f"Stage at index {args.stage_index} will be removed.",
        )


@ToolRegistry.register
class UpdateWorkflowSettingsTool(ChatTool):
    name = "update_workflow_settings"
    description = (
        "Update workflow-level settings: name, description, complexity, multi-agent chat, or visibility. "
        "Use this when the user wants to change workflow metadata without modifying stages or mini-prompts."
    )
    input_model = UpdateWorkflowSettingsArgs

    async def execute(self, args: UpdateWorkflowSettingsArgs) -> UpdateWorkflowSettingsOutput:
        return UpdateWorkflowSettingsOutput(
            updates=args,
            message="Workflow settings will be updated.",
        )
