from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Optional

from wshm_client.dom.document import Animation

from .actions import BUILTIN_ACTIONS, Action


class ActionRegistry:
    """Built-in verb table plus the target-id -> animation handle side map."""

    def __init__(self, actions: Iterable[Action] = BUILTIN_ACTIONS) -> None:
        self._actions = MappingProxyType({action.verb: action for action in actions})
        self._animations: Dict[str, Animation] = {}

    def get(self, verb: str) -> Optional[Action]:
        return self._actions.get(verb)

    def __contains__(self, verb: object) -> bool:
        return verb in self._actions

    def verbs(self) -> List[str]:
        return list(self._actions)

    def start_animation(self, target_id: str, handle: Animation) -> None:
        """Track a new handle; an older one on the same target is cancelled."""
        previous = self._animations.pop(target_id, None)
        if previous is not None and previous is not handle:
            previous.cancel()
        self._animations[target_id] = handle

    def animation_for(self, target_id: str) -> Optional[Animation]:
        return self._animations.get(target_id)

    def pause_animation(self, target_id: str) -> bool:
        handle = self._animations.get(target_id)
        if handle is None:
            return False
        handle.pause()
        return True

    def resume_animation(self, target_id: str) -> bool:
        handle = self._animations.get(target_id)
        if handle is None:
            return False
        handle.play()
        return True

    def cancel_animation(self, target_id: str) -> bool:
        handle = self._animations.pop(target_id, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def animation_state(self, target_id: str) -> str:
        handle = self._animations.get(target_id)
        return handle.play_state if handle is not None else "none"


__all__ = ["ActionRegistry"]
