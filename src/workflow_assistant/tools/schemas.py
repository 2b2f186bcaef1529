"""Argument models for the assistant's tools.

Field aliases are the camelCase names the model sees in the JSON schema.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Complexity = Literal["XS", "S", "M", "L", "XL"]


class ToolArgs(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MiniPromptDraft(ToolArgs):
    id: str | None = Field(default=None, description="Existing mini-prompt ID (if reusing existing prompt)")
    name: str = Field(min_length=1, max_length=255, description="Mini-prompt name")
    description: str | None = Field(default=None, description="Mini-prompt description")
    content: str | None = Field(
        default=None, description="Mini-prompt markdown content (required if creating new prompt)"
    )


class StageDraft(ToolArgs):
    name: str = Field(min_length=1, max_length=255, description="Stage name (1-255 characters)")
    description: str | None = Field(default=None, description="Stage description")
    color: str | None = Field(
        default=None, description="Stage color for visual identification (hex color or named color)"
    )
    with_review: bool = Field(
        default=True, description="Whether to include review/memory board at the end of this stage"
    )
    include_multi_agent_chat: bool = Field(
        default=False,
        description="Whether to enable multi-agent chat coordination prompts after each mini-prompt in this stage",
    )
    mini_prompts: list[MiniPromptDraft] = Field(
        min_length=1, description="Mini-prompts for this stage (at least 1 required)"
    )


class CreateWorkflowArgs(ToolArgs):
    name: str = Field(min_length=1, max_length=255, description="Workflow name (1-255 characters)")
    description: str | None = Field(default=None, description="Detailed workflow description")
    complexity: Complexity | None = Field(
        default=None,
        description="Workflow complexity level: XS (very simple), S (simple), M (medium), L (large), XL (very large)",
    )
    include_multi_agent_chat: bool = Field(
        default=False,
        description="Whether to include multi-agent chat coordination after each mini-prompt",
    )
    tags: list[str] | None = Field(default=None, description="Tag names to categorize the workflow")
    stages: list[StageDraft] = Field(min_length=1, description="Workflow stages (at least 1 required)")


class AddStageArgs(StageDraft):
    position: int = Field(ge=-1, description="Position to insert the stage (0 = first, -1 = last)")


class RemoveStageArgs(ToolArgs):
    stage_index: int = Field(ge=0, description="Index of the stage to remove (0-based)")


class UpdateWorkflowSettingsArgs(ToolArgs):
    name: str | None = Field(
        default=None, min_length=1, max_length=255, description="New workflow name (1-255 characters)"
    )
    description: str | None = Field(default=None, description="New workflow description")
    complexity: Complexity | None = Field(default=None, description="New complexity level")
    include_multi_agent_chat: bool | None = Field(
        default=None,
        description="Whether to include multi-agent chat coordination after each mini-prompt",
    )
    visibility: Literal["PUBLIC", "PRIVATE"] | None = Field(
        default=None,
        description="Workflow visibility: PUBLIC (discoverable by all) or PRIVATE (user-only)",
    )


class CreateMiniPromptArgs(ToolArgs):
    name: str = Field(min_length=1, max_length=255, description="Mini-prompt name (1-255 characters)")
    description: str | None = Field(
        default=None, max_length=1000, description="Mini-prompt description (max 1000 characters)"
    )
    content: str = Field(min_length=1, description="Mini-prompt content in markdown format")
    tags: list[str] | None = Field(default=None, description="Tags for categorization")


class MiniPromptUpdates(ToolArgs):
    name: str | None = Field(default=None, min_length=1, max_length=255, description="New mini-prompt name")
    description: str | None = Field(default=None, max_length=1000, description="New mini-prompt description")
    content: str | None = Field(default=None, min_length=1, description="New mini-prompt content in markdown")
    tags: list[str] | None = Field(default=None, description="Updated tags")


class ModifyMiniPromptArgs(ToolArgs):
    mini_prompt_id: str | None = Field(
        default=None, description="Database ID of the mini-prompt to modify (use this for saved mini-prompts)"
    )
    stage_position: int | None = Field(
        default=None,
        ge=0,
        description="Position of the stage containing the mini-prompt (0-based, use with miniPromptPosition)",
    )
    mini_prompt_position: int | None = Field(
        default=None,
        ge=0,
        description="Position of the mini-prompt within the stage (0-based, use with stagePosition)",
    )
    updates: MiniPromptUpdates

    @model_validator(mode="after")
    def _require_target(self) -> "ModifyMiniPromptArgs":
        if not self.mini_prompt_id and (
            self.stage_position is None or self.mini_prompt_position is None
        ):
            raise ValueError(
                "Either miniPromptId or both stagePosition and miniPromptPosition must be provided"
            )
        return self
