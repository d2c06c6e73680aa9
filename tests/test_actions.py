from __future__ import annotations

import asyncio
import logging

import pytest

from wshm_client.config import ClientConfig
from wshm_client.core.dispatcher import Dispatcher
from wshm_client.dom import MemoryDocument
from wshm_client.features import ActionKind, ActionRegistry, BUILTIN_ACTIONS
from wshm_shared.protocol import Verb, verbs_in_group


def _setup(*element_ids: str, **overrides):
    document = MemoryDocument()
    for element_id in element_ids:
        document.create(element_id)
    replies = []

    async def reply(message: str) -> None:
        replies.append(message)

    config = ClientConfig(url="ws://localhost:8765", **overrides)
    return Dispatcher(document, config, reply=reply), document, replies


def _feed(dispatcher: Dispatcher, *messages: str) -> list:
    async def run():
        return [await dispatcher.handle_message(message) for message in messages]

    return asyncio.run(run())


def test_every_builtin_verb_has_an_action():
    registry = ActionRegistry()
    expected = {verb.value for verb in Verb if verb is not Verb.ANIMATION_STATE}
    assert set(registry.verbs()) == expected
    assert {action.kind for action in BUILTIN_ACTIONS} == set(ActionKind)
    assert "animationState" in set(verbs_in_group("animation"))


def test_update_replaces_content(caplog):
    dispatcher, document, _ = _setup("content")
    assert _feed(dispatcher, "update|content|<p>Hi</p>") == [True]
    assert document.get_element_by_id("content").inner_html == "<p>Hi</p>"
    assert caplog.records == []


def test_insert_positions():
    dispatcher, document, _ = _setup("list")
    element = document.get_element_by_id("list")
    element.inner_html = "<li>b</li>"
    _feed(
        dispatcher,
        "append|list|<li>c</li>",
        "prepend|list|<li>a</li>",
        "before|list|<h2>t</h2>",
        "after|list|<hr>",
    )
    assert element.inner_html == "<li>a</li><li>b</li><li>c</li>"
    assert element.before == ["<h2>t</h2>"]
    assert element.after == ["<hr>"]


def test_replace_and_swap_detach_the_target():
    dispatcher, document, _ = _setup("form", "panel")
    form = document.get_element_by_id("form")
    _feed(dispatcher, "replace|form|<form id='form2'></form>", "swap|panel|<div></div>")
    assert form.replaced_by == "<form id='form2'></form>"
    assert "form" not in document
    assert "panel" not in document


def test_remove_detaches_element():
    dispatcher, document, _ = _setup("old_element")
    assert _feed(dispatcher, "remove|old_element|") == [True]
    assert document.get_element_by_id("old_element") is None


def test_set_and_remove_attribute():
    dispatcher, document, _ = _setup("btn")
    element = document.get_element_by_id("btn")
    _feed(
        dispatcher,
        "setAttr|btn|disabled|true",
        "setAttr|btn|placeholder",
        "setAttr|btn|title|~Hello World | & Good Morning~",
        "setAttr|btn|data-id|123",
        "removeAttr|btn|data-id",
    )
    assert element.attributes == {
        "disabled": "true",
        "placeholder": "",
        "title": "Hello World | & Good Morning",
    }


def test_class_verbs():
    dispatcher, document, _ = _setup("box")
    element = document.get_element_by_id("box")
    _feed(
        dispatcher,
        "addClass|box|class1 class2 class3",
        "addClass|box|   ",
        "removeClass|box|class2",
        "toggleClass|box|class1",
        "toggleClass|box|active",
    )
    assert element.class_list == ["class3", "active"]


def test_style_verbs():
    dispatcher, document, _ = _setup("box")
    element = document.get_element_by_id("box")
    _feed(
        dispatcher,
        "setStyle|box|color|blue",
        "setStyle|box|font-family|Arial, sans-serif",
        "setStyle|box|width|100%",
        "removeStyle|box|color",
        "removeStyle|box|non-existent-property",
    )
    assert element.style == {"font-family": "Arial, sans-serif", "width": "100%"}


def test_form_verbs():
    dispatcher, document, _ = _setup("name", "agree", "choices")
    _feed(
        dispatcher,
        "setValue|name|Hello & World <b>x</b>",
        "setChecked|agree|true",
        "setSelected|choices|option1, option3",
    )
    assert document.get_element_by_id("name").value == "Hello & World <b>x</b>"
    assert document.get_element_by_id("agree").checked is True
    assert document.get_element_by_id("choices").selected == ["option1", "option3"]

    _feed(dispatcher, "setChecked|agree|false")
    assert document.get_element_by_id("agree").checked is False


def test_trigger_with_and_without_init():
    dispatcher, document, _ = _setup("field")
    element = document.get_element_by_id("field")
    seen = []
    element.add_event_listener("keydown", seen.append)
    _feed(
        dispatcher,
        "trigger|field|click",
        'trigger|field|keydown|~{"key": "Enter"}~',
        "trigger|field|",
    )
    assert [event.type for event in element.events] == ["click", "keydown"]
    assert element.events[0].init == {"bubbles": True, "cancelable": True, "detail": None}
    assert seen[0].init["key"] == "Enter"


def test_trigger_falls_back_to_raw_detail():
    dispatcher, document, _ = _setup("field")
    element = document.get_element_by_id("field")
    _feed(dispatcher, "trigger|field|custom-event|~Hello World | & Good Morning~")
    assert element.events[0].type == "custom-event"
    assert element.events[0].init["detail"] == "Hello World | & Good Morning"


def test_trigger_rejects_prototype_pollution(caplog):
    dispatcher, document, _ = _setup("field")
    element = document.get_element_by_id("field")
    raw = '{"__proto__": {"admin": true}}'
    assert _feed(dispatcher, f"trigger|field|custom-event|~{raw}~") == [True]
    assert element.events[0].init["detail"] == raw
    assert any(record.name == "wshm.security" for record in caplog.records)


def test_trigger_rejects_oversize_json():
    dispatcher, document, _ = _setup("field", max_json_size=16)
    element = document.get_element_by_id("field")
    raw = '{"data": "' + "x" * 32 + '"}'
    _feed(dispatcher, f"trigger|field|custom-event|~{raw}~")
    assert element.events[0].init["detail"] == raw


def test_animate_decodes_positional_timing():
    dispatcher, document, _ = _setup("box")
    element = document.get_element_by_id("box")
    _feed(dispatcher, "animate|box|slideIn|1s|ease|0s|3|alternate|forwards|option1")
    animation = element.animations[0]
    assert animation.name == "slideIn"
    assert animation.timing.iterations == "3"
    assert animation.timing.direction == "alternate"
    assert animation.timing.fill == "forwards"
    assert dispatcher.registry.animation_for("box") is animation


def test_animate_defaults():
    dispatcher, document, _ = _setup("box")
    _feed(dispatcher, "animate|box|fadeIn")
    timing = document.get_element_by_id("box").animations[0].timing
    assert (timing.duration, timing.easing, timing.delay) == ("1s", "ease", "0s")


def test_new_animation_cancels_previous():
    dispatcher, document, _ = _setup("box")
    _feed(dispatcher, "animate|box|fadeIn|1s", "animate|box|slideIn|1s")
    first, second = document.get_element_by_id("box").animations
    assert first.play_state == "idle"
    assert second.play_state == "running"


def test_animation_control_verbs():
    dispatcher, document, replies = _setup("box")
    _feed(dispatcher, "animate|box|pulse|1s|ease-in-out|0s|infinite", "pauseAnimation|box|")
    animation = document.get_element_by_id("box").animations[0]
    assert animation.play_state == "paused"

    _feed(dispatcher, "getAnimationState|box|", "resumeAnimation|box|")
    assert animation.play_state == "running"
    assert replies == ["animationState|box|paused"]

    _feed(dispatcher, "removeAnimation|box|", "getAnimationState|box|")
    assert animation.play_state == "idle"
    assert replies[-1] == "animationState|box|none"


def test_control_verbs_without_handle_are_noops():
    dispatcher, document, _ = _setup("box")
    results = _feed(dispatcher, "pauseAnimation|box|", "resumeAnimation|box|", "removeAnimation|box|")
    assert results == [True, True, True]
    assert document.get_element_by_id("box").animations == []


def test_remove_drops_animation_handle():
    dispatcher, _, _ = _setup("box")
    _feed(dispatcher, "animate|box|spin|2s", "remove|box|")
    assert dispatcher.registry.animation_for("box") is None


def test_keyframe_with_frames_and_fallback():
    dispatcher, document, _ = _setup("box", "other")
    _feed(
        dispatcher,
        'keyframe|box|customAnimation|~{"0%": {"opacity": "0"}, "100%": {"opacity": "1"}}~|2s',
        "keyframe|other|brokenAnimation|~{not json~|2s",
    )
    good = document.get_element_by_id("box").animations[0]
    assert good.keyframes == {"0%": {"opacity": "0"}, "100%": {"opacity": "1"}}
    assert good.timing.duration == "2s"
    fallback = document.get_element_by_id("other").animations[0]
    assert fallback.keyframes is None
    assert fallback.name == "brokenAnimation"


def test_transition_sets_style():
    dispatcher, document, _ = _setup("box")
    _feed(dispatcher, "transition|box|opacity,transform|0.5s|ease-in")
    assert document.get_element_by_id("box").style["transition"] == (
        "opacity 0.5s ease-in 0s, transform 0.5s ease-in 0s"
    )


def test_handler_failure_is_isolated(caplog):
    caplog.set_level(logging.ERROR)
    dispatcher, document, _ = _setup("btn")
    results = _feed(dispatcher, "setAttr|btn||true", "setAttr|btn|disabled|true")
    assert results == [False, True]
    assert document.get_element_by_id("btn").attributes == {"disabled": "true"}
    assert "Handler error for setAttr" in caplog.text


def test_unknown_insert_position_rejected():
    element = MemoryDocument().create("list")
    with pytest.raises(ValueError):
        element.insert_adjacent_html("middle", "<li>x</li>")
    assert element.inner_html == ""
