from .app_state import AppState, Notification
from .messages import ERROR_MESSAGES, get_error_message
from .steps import EntryStep, RoundDraft, validate_step
from .workflow import RoundEntryWorkflow, RoundStore, WorkflowError

__all__ = [
    "AppState",
    "Notification",
    "ERROR_MESSAGES",
    "get_error_message",
    "EntryStep",
    "RoundDraft",
    "validate_step",
    "RoundEntryWorkflow",
    "RoundStore",
    "WorkflowError",
]
