"""Host surface that holds a mounted diagram and its event listeners.

Listeners are never collected implicitly: every ``add_listener`` must be matched
by a ``remove_listener`` (or a ``clear``) before the surface is reused.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from xml.etree import ElementTree as ET

from masterplan.diagram.svg_document import DiagramDocument


@dataclass
class InteractionEvent:
    type: str
    target: ET.Element
    key: Optional[str] = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


Handler = Callable[[InteractionEvent], None]


@dataclass(frozen=True, eq=False)
class ListenerEntry:
    element: ET.Element
    event: str
    handler: Handler


@dataclass
class HostSurface:
    content: Optional[DiagramDocument] = None
    error_message: Optional[str] = None
    _listeners: List[ListenerEntry] = field(default_factory=list, repr=False)
    _parents: Dict[ET.Element, ET.Element] = field(default_factory=dict, repr=False)

    def mount(self, document: DiagramDocument) -> None:
        self.content = document
        self.error_message = None
        self._parents = {child: parent for parent in document.root.iter() for child in parent}

    def show_error(self, message: str) -> None:
        self.content = None
        self._parents = {}
        self.error_message = message

    def clear(self) -> None:
        """Drop the rendered content and detach any listener still attached."""
        self._listeners.clear()
        self._parents = {}
        self.content = None
        self.error_message = None

    @property
    def is_empty(self) -> bool:
        return self.content is None and self.error_message is None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, element: ET.Element, event: str, handler: Handler) -> ListenerEntry:
        entry = ListenerEntry(element=element, event=event, handler=handler)
        self._listeners.append(entry)
        return entry

    def remove_listener(self, entry: ListenerEntry) -> None:
        try:
            self._listeners.remove(entry)
        except ValueError:
            pass

    def listeners_for(self, element: ET.Element, event: Optional[str] = None) -> List[ListenerEntry]:
        return [
            entry
            for entry in self._listeners
            if entry.element is element and (event is None or entry.event == event)
        ]

    def dispatch(self, element_id: str, event_type: str, key: Optional[str] = None) -> InteractionEvent:
        """Deliver an event to the element with ``element_id`` and bubble it upwards."""
        if self.content is None:
            raise LookupError("No diagram mounted")
        target = self.content.find_by_id(element_id)
        if target is None:
            raise LookupError(f"No element with id '{element_id}'")
        event = InteractionEvent(type=event_type, target=target, key=key)
        node: Optional[ET.Element] = target
        while node is not None and not event.propagation_stopped:
            for entry in self.listeners_for(node, event_type):
                entry.handler(event)
            node = self._parents.get(node)
        return event
