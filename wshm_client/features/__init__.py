from .actions import BUILTIN_ACTIONS, Action, ActionContext, ActionKind
from .registry import ActionRegistry

__all__ = ["Action", "ActionContext", "ActionKind", "ActionRegistry", "BUILTIN_ACTIONS"]
