from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from wshm_shared.protocol.messages import AnimationTiming

INSERT_POSITIONS = ("beforebegin", "afterbegin", "beforeend", "afterend")


@runtime_checkable
class Animation(Protocol):
    """Handle of a running timed effect."""

    play_state: str

    def pause(self) -> None: ...

    def play(self) -> None: ...

    def cancel(self) -> None: ...


@runtime_checkable
class Element(Protocol):
    """Mutation capabilities the built-in actions need from a target."""

    id: str

    def set_inner_html(self, html: str) -> None: ...

    def insert_adjacent_html(self, position: str, html: str) -> None: ...

    def replace_with_html(self, html: str) -> None: ...

    def remove(self) -> None: ...

    def set_attribute(self, name: str, value: str) -> None: ...

    def remove_attribute(self, name: str) -> None: ...

    def add_class(self, *tokens: str) -> None: ...

    def remove_class(self, *tokens: str) -> None: ...

    def toggle_class(self, token: str) -> bool: ...

    def set_style(self, prop: str, value: str) -> None: ...

    def remove_style(self, prop: str) -> None: ...

    def set_value(self, value: str) -> None: ...

    def set_checked(self, checked: bool) -> None: ...

    def set_selected(self, values: Sequence[str]) -> None: ...

    def dispatch_event(self, event_type: str, init: Dict[str, Any]) -> None: ...

    def animate(self, name: str, keyframes: Any, timing: AnimationTiming) -> Animation: ...


@runtime_checkable
class Document(Protocol):
    """Lookup-by-identifier service over the target tree."""

    def get_element_by_id(self, element_id: str) -> Optional[Element]: ...


@dataclass
class DispatchedEvent:
    type: str
    init: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MemoryAnimation:
    name: str
    keyframes: Any
    timing: AnimationTiming
    play_state: str = "running"

    def pause(self) -> None:
        if self.play_state == "running":
            self.play_state = "paused"

    def play(self) -> None:
        if self.play_state in ("paused", "idle"):
            self.play_state = "running"

    def cancel(self) -> None:
        self.play_state = "idle"


EventListener = Callable[[DispatchedEvent], Any]


class MemoryElement:
    """Plain-python stand-in for a DOM element; html is stored, never parsed."""

    def __init__(self, element_id: str, tag: str = "div", inner_html: str = "") -> None:
        self.id = element_id
        self.tag = tag
        self.inner_html = inner_html
        self.attributes: Dict[str, str] = {}
        self.style: Dict[str, str] = {}
        self.class_list: List[str] = []
        self.value: str = ""
        self.checked: bool = False
        self.selected: List[str] = []
        self.before: List[str] = []
        self.after: List[str] = []
        self.replaced_by: Optional[str] = None
        self.events: List[DispatchedEvent] = []
        self.animations: List[MemoryAnimation] = []
        self.document: Optional["MemoryDocument"] = None
        self._listeners: Dict[str, List[EventListener]] = {}

    def __repr__(self) -> str:
        return f"<MemoryElement {self.tag}#{self.id}>"

    @property
    def connected(self) -> bool:
        return self.document is not None

    def set_inner_html(self, html: str) -> None:
        self.inner_html = html

    def insert_adjacent_html(self, position: str, html: str) -> None:
        if position not in INSERT_POSITIONS:
            raise ValueError(f"Unknown insert position {position!r}")
        if position == "beforebegin":
            self.before.append(html)
        elif position == "afterbegin":
            self.inner_html = html + self.inner_html
        elif position == "beforeend":
            self.inner_html = self.inner_html + html
        else:
            self.after.insert(0, html)

    def replace_with_html(self, html: str) -> None:
        self.replaced_by = html
        self.remove()

    def remove(self) -> None:
        if self.document is not None:
            self.document.detach(self.id)

    def set_attribute(self, name: str, value: str) -> None:
        if not name:
            raise ValueError("Attribute name cannot be empty")
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def add_class(self, *tokens: str) -> None:
        for token in tokens:
            if token not in self.class_list:
                self.class_list.append(token)

    def remove_class(self, *tokens: str) -> None:
        self.class_list = [token for token in self.class_list if token not in tokens]

    def toggle_class(self, token: str) -> bool:
        if token in self.class_list:
            self.class_list.remove(token)
            return False
        self.class_list.append(token)
        return True

    def set_style(self, prop: str, value: str) -> None:
        if not prop:
            raise ValueError("Style property cannot be empty")
        if value:
            self.style[prop] = value
        else:
            self.style.pop(prop, None)

    def remove_style(self, prop: str) -> None:
        self.style.pop(prop, None)

    def set_value(self, value: str) -> None:
        self.value = value

    def set_checked(self, checked: bool) -> None:
        self.checked = checked

    def set_selected(self, values: Sequence[str]) -> None:
        self.selected = list(values)

    def add_event_listener(self, event_type: str, listener: EventListener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def dispatch_event(self, event_type: str, init: Dict[str, Any]) -> None:
        event = DispatchedEvent(event_type, dict(init))
        self.events.append(event)
        for listener in list(self._listeners.get(event_type, [])):
            listener(event)

    def animate(self, name: str, keyframes: Any, timing: AnimationTiming) -> MemoryAnimation:
        animation = MemoryAnimation(name=name, keyframes=keyframes, timing=timing)
        self.animations.append(animation)
        return animation


class MemoryDocument:
    """Very lightweight id -> element index."""

    def __init__(self) -> None:
        self._elements: Dict[str, MemoryElement] = {}

    def add(self, element: MemoryElement) -> MemoryElement:
        element.document = self
        self._elements[element.id] = element
        return element

    def create(self, element_id: str, tag: str = "div", inner_html: str = "") -> MemoryElement:
        return self.add(MemoryElement(element_id, tag, inner_html))

    def detach(self, element_id: str) -> Optional[MemoryElement]:
        element = self._elements.pop(element_id, None)
        if element is not None:
            element.document = None
        return element

    def get_element_by_id(self, element_id: str) -> Optional[MemoryElement]:
        return self._elements.get(element_id)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def __len__(self) -> int:
        return len(self._elements)


__all__ = [
    "INSERT_POSITIONS",
    "Animation",
    "Element",
    "Document",
    "DispatchedEvent",
    "MemoryAnimation",
    "MemoryElement",
    "MemoryDocument",
]
