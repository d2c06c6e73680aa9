from .document import (
    Animation,
    DispatchedEvent,
    Document,
    Element,
    MemoryAnimation,
    MemoryDocument,
    MemoryElement,
)

__all__ = [
    "Animation",
    "DispatchedEvent",
    "Document",
    "Element",
    "MemoryAnimation",
    "MemoryDocument",
    "MemoryElement",
]
