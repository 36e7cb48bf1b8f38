# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Event subscription and notification for the tree engine.

Every state change of the engine is announced as a TreeEvent carrying the
affected node id and a full TreeStateSnapshot, so a renderer can diff
against what it last drew.

Example:
    >>> engine.subscribe('renderer', lambda event: print(event.name, event.node_id))
    >>> engine.toggle_expand('root')
    nodeExpand root
    >>> engine.subscribe('checks', on_check, events=[NODE_CHECK])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from .state import TreeStateSnapshot

NODE_EXPAND = 'nodeExpand'
NODE_COLLAPSE = 'nodeCollapse'
NODE_SELECT = 'nodeSelect'
NODE_CHECK = 'nodeCheck'
NODE_INSERT = 'nodeInsert'
NODE_DELETE = 'nodeDelete'
NODE_MOVE = 'nodeMove'
NODE_UPDATE = 'nodeUpdate'
NODE_LOAD_START = 'nodeLoadStart'
NODE_LOAD = 'nodeLoad'
NODE_LOAD_ERROR = 'nodeLoadError'
SEARCH = 'search'

EVENT_NAMES = frozenset((
    NODE_EXPAND, NODE_COLLAPSE, NODE_SELECT, NODE_CHECK,
    NODE_INSERT, NODE_DELETE, NODE_MOVE, NODE_UPDATE,
    NODE_LOAD_START, NODE_LOAD, NODE_LOAD_ERROR, SEARCH,
))


@dataclass(frozen=True)
class TreeEvent:
    """A state change notification.

    Attributes:
        name: One of the event name constants (e.g. 'nodeExpand').
        node_id: Affected node, or None for bulk operations.
        state: Full state after the change.
    """

    name: str
    node_id: str | None
    state: TreeStateSnapshot


SubscriberCallback = Callable[[TreeEvent], object]


class SubscriptionMixin:
    """Subscriber registry mixed into the engine.

    Subclasses must initialize ``_subscribers`` and implement ``_snapshot()``.
    """

    _subscribers: dict[str, tuple[SubscriberCallback, frozenset[str]]]

    def _snapshot(self) -> TreeStateSnapshot:
        raise NotImplementedError

    def subscribe(
        self,
        subscriber_id: str,
        callback: SubscriberCallback,
        events: Iterable[str] | None = None,
    ) -> None:
        """Register a callback for state change events.

        Args:
            subscriber_id: Unique name; subscribing again replaces the callback.
            callback: Called with a TreeEvent after each change.
            events: Event names to receive. None receives all of them.

        Raises:
            ValueError: If an event name is unknown.
        """
        wanted = EVENT_NAMES if events is None else frozenset(events)
        unknown = wanted - EVENT_NAMES
        if unknown:
            raise ValueError(f"Unknown event name(s): {', '.join(sorted(unknown))}")
        self._subscribers[subscriber_id] = (callback, wanted)

    def unsubscribe(self, subscriber_id: str) -> None:
        """Remove a subscriber; unknown ids are ignored."""
        self._subscribers.pop(subscriber_id, None)

    def _notify(self, name: str, node_id: str | None = None) -> None:
        """Deliver an event to every interested subscriber."""
        if not self._subscribers:
            return
        event = TreeEvent(name, node_id, self._snapshot())
        for callback, wanted in list(self._subscribers.values()):
            if name in wanted:
                callback(event)
