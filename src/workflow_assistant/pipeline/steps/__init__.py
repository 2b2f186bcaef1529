from workflow_assistant.pipeline.steps.build_context import BuildContextStep
from workflow_assistant.pipeline.steps.check_auto_reset import CheckAutoResetStep
from workflow_assistant.pipeline.steps.determine_session import DetermineSessionStep
from workflow_assistant.pipeline.steps.execute_completion import ExecuteCompletionStep
from workflow_assistant.pipeline.steps.persist_messages import PersistMessagesStep
from workflow_assistant.pipeline.steps.prepare_data import PrepareDataStep
from workflow_assistant.pipeline.steps.prepare_request import PrepareRequestStep

__all__ = [
    "BuildContextStep",
    "CheckAutoResetStep",
    "DetermineSessionStep",
    "ExecuteCompletionStep",
    "PersistMessagesStep",
    "PrepareDataStep",
    "PrepareRequestStep",
]
