from __future__ import annotations

from enum import StrEnum
from typing import Dict, Iterable, Union


class Verb(StrEnum):
    """
    Canonical built-in verb names understood by every client.
    Senders may use verbs outside this set; receivers skip what they don't know.
    """

    # Content domain
    UPDATE = "update"
    APPEND = "append"
    PREPEND = "prepend"
    REPLACE = "replace"
    SWAP = "swap"
    BEFORE = "before"
    AFTER = "after"
    REMOVE = "remove"

    # Attribute domain
    SET_ATTR = "setAttr"
    REMOVE_ATTR = "removeAttr"

    # Class domain
    ADD_CLASS = "addClass"
    REMOVE_CLASS = "removeClass"
    TOGGLE_CLASS = "toggleClass"

    # Style domain
    SET_STYLE = "setStyle"
    REMOVE_STYLE = "removeStyle"

    # Form domain
    SET_VALUE = "setValue"
    SET_CHECKED = "setChecked"
    SET_SELECTED = "setSelected"

    # Event domain
    TRIGGER = "trigger"

    # Animation domain
    ANIMATE = "animate"
    TRANSITION = "transition"
    KEYFRAME = "keyframe"
    PAUSE_ANIMATION = "pauseAnimation"
    RESUME_ANIMATION = "resumeAnimation"
    REMOVE_ANIMATION = "removeAnimation"
    GET_ANIMATION_STATE = "getAnimationState"
    ANIMATION_STATE = "animationState"


VERB_GROUPS: Dict[str, str] = {
    Verb.UPDATE.value: "content",
    Verb.APPEND.value: "content",
    Verb.PREPEND.value: "content",
    Verb.REPLACE.value: "content",
    Verb.SWAP.value: "content",
    Verb.BEFORE.value: "content",
    Verb.AFTER.value: "content",
    Verb.REMOVE.value: "content",
    Verb.SET_ATTR.value: "attribute",
    Verb.REMOVE_ATTR.value: "attribute",
    Verb.ADD_CLASS.value: "class",
    Verb.REMOVE_CLASS.value: "class",
    Verb.TOGGLE_CLASS.value: "class",
    Verb.SET_STYLE.value: "style",
    Verb.REMOVE_STYLE.value: "style",
    Verb.SET_VALUE.value: "form",
    Verb.SET_CHECKED.value: "form",
    Verb.SET_SELECTED.value: "form",
    Verb.TRIGGER.value: "event",
    Verb.ANIMATE.value: "animation",
    Verb.TRANSITION.value: "animation",
    Verb.KEYFRAME.value: "animation",
    Verb.PAUSE_ANIMATION.value: "animation",
    Verb.RESUME_ANIMATION.value: "animation",
    Verb.REMOVE_ANIMATION.value: "animation",
    Verb.GET_ANIMATION_STATE.value: "animation",
    Verb.ANIMATION_STATE.value: "animation",
}


def normalize_verb(verb: Union[str, Verb]) -> str:
    """Convert enum/string into canonical verb text."""
    return verb.value if isinstance(verb, Verb) else str(verb)


def verbs_in_group(group: str) -> Iterable[str]:
    """Yield verbs belonging to the specified logical domain."""
    for verb, grp in VERB_GROUPS.items():
        if grp == group:
            yield verb


__all__ = [
    "Verb",
    "VERB_GROUPS",
    "normalize_verb",
    "verbs_in_group",
]
