# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeViewEngine - The public facade of the tree state engine.

The engine combines the NodeStore, the TreeState, the selection/check
coordinator and the mutation gateway behind one object. A renderer talks to
nothing else: it sends intents (toggle_expand, select, set_checked, search,
structural edits) and reads get_visible_rows() or listens to events.

Every public operation is atomic from the caller's point of view: it fully
updates store and state before returning (and before subscribers run), or
raises leaving both untouched.

Example:
    Basic usage::

        engine = TreeViewEngine([
            {'id': 'root', 'label': 'Root', 'children': [
                {'id': 'A', 'label': 'Folder A', 'children': [
                    {'id': 'A1', 'label': 'first leaf'},
                    {'id': 'A2', 'label': 'second leaf'},
                ]},
                {'id': 'B', 'label': 'Folder B'},
            ]},
        ])
        engine.subscribe('ui', redraw)
        engine.toggle_expand('root')
        engine.set_checked('A1', True)
        engine.is_indeterminate('A')  # True
        for row in engine.get_visible_rows():
            print('  ' * row.depth + row.label)

    Lazy children::

        def loader(load):
            fetch_async(load.node_id, on_done=load.resolve, on_error=load.fail)

        engine = TreeViewEngine(
            [{'id': 'remote', 'lazy': True, 'hasChildren': True}], loader=loader
        )
        engine.toggle_expand('remote')  # issues the LazyLoad, node pending
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .lazy import LazyLoad, LoadStatus
from .mutation import MutationGateway
from .node import TreeNode
from .selection import SelectionCoordinator
from .state import TreeState, TreeStateSnapshot
from .store import NodeStore
from .store.core import NodeSource
from .subscription import (
    NODE_CHECK,
    NODE_COLLAPSE,
    NODE_DELETE,
    NODE_EXPAND,
    NODE_INSERT,
    NODE_LOAD,
    NODE_LOAD_ERROR,
    NODE_LOAD_START,
    NODE_MOVE,
    NODE_SELECT,
    NODE_UPDATE,
    SEARCH,
    SubscriptionMixin,
)
from .visibility import VisibilityResolver

logger = logging.getLogger(__name__)

Loader = Callable[[LazyLoad], Any]


@dataclass(frozen=True)
class TreeRow:
    """One rendered row of the tree view.

    is_expanded is also True for nodes held open by an active search.
    is_search_match means the row's own label matches the active search
    term; it is False on every row while no search is active.
    """

    id: str
    label: str
    depth: int
    icon: str | None
    is_expanded: bool
    is_leaf: bool
    is_selected: bool
    is_checked: bool
    is_indeterminate: bool
    is_search_match: bool
    is_disabled: bool = False
    is_loading: bool = False


class TreeViewEngine(SubscriptionMixin):
    """State engine behind a tree-view widget.

    Attributes:
        readonly: If True, select(), set_checked() and reparent() are no-ops.
        disabled: If True, toggle_expand() is a no-op as well.
        selectable: If False, select() is a no-op.
        checkable: If False, set_checked() is a no-op.
        draggable: If False, reparent() is a no-op.
        loader: Optional callable receiving every new LazyLoad request.
    """

    def __init__(
        self,
        source: NodeSource | NodeStore | None = None,
        multiple: bool = False,
        raise_on_error: bool = True,
        readonly: bool = False,
        disabled: bool = False,
        selectable: bool = True,
        checkable: bool = True,
        draggable: bool = True,
        loader: Loader | None = None,
    ) -> None:
        """Initialize a TreeViewEngine.

        Args:
            source: Initial tree. Can be:
                - list: Root-level TreeNode instances or node dicts
                - dict: A single root node dict
                - NodeStore: Used as is (the engine takes ownership)
            multiple: Multi-select mode; select() toggles membership.
            raise_on_error: If True (default), set_checked() on a disabled
                node raises DisabledNodeError. If False it is a no-op.
            readonly: Ignore selection, check and drag gestures.
            disabled: Ignore every user gesture.
            selectable: Allow select() gestures.
            checkable: Allow set_checked() gestures.
            draggable: Allow reparent() (drag and drop) gestures.
            loader: Called with each LazyLoad issued for a lazy node.
        """
        if isinstance(source, NodeStore):
            self._store = source
        else:
            self._store = NodeStore(source)
        self._state = TreeState()
        self._coordinator = SelectionCoordinator(
            self._store, self._state, multiple=multiple, raise_on_error=raise_on_error
        )
        self._gateway = MutationGateway(self._store, self._state, self._coordinator)
        self._subscribers = {}
        self.readonly = readonly
        self.disabled = disabled
        self.selectable = selectable
        self.checkable = checkable
        self.draggable = draggable
        self.loader = loader

    def __repr__(self) -> str:
        return f"TreeViewEngine({self._store!r}, {self._state!r})"

    # ==================== Properties ====================

    @property
    def store(self) -> NodeStore:
        """The underlying NodeStore."""
        return self._store

    @property
    def state(self) -> TreeStateSnapshot:
        """Frozen snapshot of the current view state."""
        return self._state.snapshot()

    @property
    def multiple(self) -> bool:
        return self._coordinator.multiple

    @property
    def raise_on_error(self) -> bool:
        return self._coordinator.raise_on_error

    def _snapshot(self) -> TreeStateSnapshot:
        return self._state.snapshot()

    def _gestures_blocked(self, node_id: str, allowed: bool) -> bool:
        """True (after validating node_id) if a select, check or drag gesture is off.

        Args:
            node_id: Target of the gesture.
            allowed: The switch of this gesture (selectable, checkable, draggable).
        """
        self._store.find_by_id(node_id)
        return self.readonly or self.disabled or not allowed

    # ==================== Expansion ====================

    def toggle_expand(self, node_id: str) -> LazyLoad | None:
        """Expand or collapse a node.

        Expanding an unloaded lazy node issues (or returns the already
        pending) LazyLoad instead of expanding immediately; the node
        expands once the load resolves.

        Returns:
            The LazyLoad for lazy nodes, else None.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        self._store.find_by_id(node_id)
        if self.disabled:
            return None
        if node_id in self._state.expanded_ids:
            self.collapse(node_id)
            return None
        return self.expand(node_id)

    def expand(self, node_id: str) -> LazyLoad | None:
        """Expand a node; leaves are ignored, lazy nodes start loading.

        Returns:
            The LazyLoad for unloaded lazy nodes, else None.
        """
        node = self._store.find_by_id(node_id)
        if node_id in self._state.expanded_ids:
            return None
        if node.is_pending_lazy:
            # stays collapsed until the fetched children arrive
            return self._request_load(node)
        if node.is_leaf:
            return None
        self._state.expanded_ids.add(node_id)
        logger.debug("Expanded %s", node_id)
        self._notify(NODE_EXPAND, node_id)
        return None

    def collapse(self, node_id: str) -> bool:
        """Collapse a node; return True if it was expanded."""
        self._store.find_by_id(node_id)
        if node_id not in self._state.expanded_ids:
            return False
        self._state.expanded_ids.discard(node_id)
        logger.debug("Collapsed %s", node_id)
        self._notify(NODE_COLLAPSE, node_id)
        return True

    def expand_all(self) -> bool:
        """Expand every node that has loaded children.

        Unloaded lazy nodes are left alone: expanding everything must not
        fire a fetch per lazy node.
        """
        branches = {
            node.id for node, _ in self._store.walk()
            if node.children and not node.is_pending_lazy
        }
        if branches <= self._state.expanded_ids:
            return False
        self._state.expanded_ids |= branches
        self._notify(NODE_EXPAND)
        return True

    def collapse_all(self) -> bool:
        """Collapse every node; return True if anything was expanded."""
        if not self._state.expanded_ids:
            return False
        self._state.expanded_ids.clear()
        self._notify(NODE_COLLAPSE)
        return True

    def expand_to_node(self, node_id: str) -> bool:
        """Expand all ancestors of a node, leaving other expansions alone.

        Returns:
            True if any ancestor was expanded.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        if not self._gateway.expand_to_node(node_id):
            return False
        self._notify(NODE_EXPAND, node_id)
        return True

    # ==================== Lazy loading ====================

    def is_pending(self, node_id: str) -> bool:
        """True while a lazy load for node_id is in flight."""
        return self._gateway.pending_load(node_id) is not None

    def _request_load(self, node: TreeNode) -> LazyLoad:
        load = self._gateway.pending_load(node.id)
        if load is not None:
            logger.debug("Coalesced expand of %s into pending load", node.id)
            return load

        load = LazyLoad(node.id, self._gateway.complete_load, self._gateway.abandon_load)
        load.add_done_callback(self._on_load_done)
        self._gateway.track_load(load)
        self._notify(NODE_LOAD_START, node.id)
        if self.loader is not None:
            try:
                self.loader(load)
            except Exception as exc:
                # a raising loader is a failed fetch, reported on the load itself
                if load.pending:
                    load.fail(exc)
        return load

    def _on_load_done(self, load: LazyLoad) -> None:
        if load.status is LoadStatus.RESOLVED:
            self._notify(NODE_LOAD, load.node_id)
            self._notify(NODE_EXPAND, load.node_id)
        elif load.status is LoadStatus.FAILED:
            self._notify(NODE_LOAD_ERROR, load.node_id)

    # ==================== Selection and checks ====================

    def select(self, node_id: str) -> bool:
        """Select a node (toggle in multi-select mode).

        Disabled or non-selectable nodes make this a no-op, and so do
        readonly, disabled or non-selectable engines.

        Returns:
            True if the selection changed.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        if self._gestures_blocked(node_id, self.selectable):
            return False
        if not self._coordinator.select(node_id):
            return False
        self._notify(NODE_SELECT, node_id)
        return True

    def set_checked(self, node_id: str, checked: bool) -> bool:
        """Check or uncheck a node with tri-state propagation.

        Readonly, disabled or non-checkable engines make this a no-op.

        Returns:
            True if the checked set changed.

        Raises:
            NotFoundError: If node_id is not in the store.
            DisabledNodeError: If the node is disabled and raise_on_error is set.
        """
        if self._gestures_blocked(node_id, self.checkable):
            return False
        if not self._coordinator.set_checked(node_id, checked):
            return False
        self._notify(NODE_CHECK, node_id)
        return True

    def select_all(self) -> bool:
        """Select every selectable node (multi-select mode only)."""
        if not self._coordinator.select_all():
            return False
        self._notify(NODE_SELECT)
        return True

    def deselect_all(self) -> bool:
        if not self._coordinator.deselect_all():
            return False
        self._notify(NODE_SELECT)
        return True

    def check_all(self) -> bool:
        if not self._coordinator.check_all():
            return False
        self._notify(NODE_CHECK)
        return True

    def uncheck_all(self) -> bool:
        if not self._coordinator.uncheck_all():
            return False
        self._notify(NODE_CHECK)
        return True

    def is_checked(self, node_id: str) -> bool:
        return self._coordinator.is_checked(node_id)

    def is_indeterminate(self, node_id: str) -> bool:
        return self._coordinator.is_indeterminate(node_id)

    def has_checked_descendant(self, node_id: str) -> bool:
        return self._coordinator.has_checked_descendant(node_id)

    def get_indeterminate_ids(self) -> set[str]:
        return self._coordinator.indeterminate_ids()

    # ==================== Search ====================

    def search(self, term: str) -> None:
        """Filter visible rows by label (case-insensitive substring).

        The expanded set is left untouched; matches are exposed through
        implicitly opened ancestors.
        """
        if term == self._state.search_term:
            return
        self._state.search_term = term
        logger.debug("Search term set to %r", term)
        self._notify(SEARCH)

    def clear_search(self) -> None:
        self.search('')

    def search_nodes(self, term: str) -> list[TreeNode]:
        """Apply a search and return the nodes whose label matches it."""
        self.search(term)
        resolver = VisibilityResolver(self._store, self._state.expanded_ids, term)
        return resolver.direct_matches()

    # ==================== Structure ====================

    def add_node(
        self,
        parent_id: str | None,
        node: TreeNode | dict[str, Any],
        index: int | None = None,
    ) -> TreeNode:
        """Insert a node (dict or TreeNode) under parent_id.

        Raises:
            NotFoundError: If parent_id is not in the store.
            DuplicateIdError: If an id of the new subtree already exists.
        """
        inserted = self._gateway.add_node(parent_id, node, index)
        self._notify(NODE_INSERT, inserted.id)
        return inserted

    def remove_node(self, node_id: str) -> list[str]:
        """Remove a node and its subtree; return the removed ids.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        removed = self._gateway.remove_node(node_id)
        self._notify(NODE_DELETE, node_id)
        return removed

    def reparent(
        self,
        dragged_id: str,
        new_parent_id: str | None,
        index: int | None = None,
    ) -> TreeNode | None:
        """Move a subtree under new_parent_id at index (drag and drop).

        Readonly, disabled or non-draggable engines make this a no-op.

        Returns:
            The moved TreeNode, or None if dragging is switched off.

        Raises:
            NotFoundError: If either id is not in the store.
            CycleError: If the target is the dragged node or inside it.
            DisabledNodeError: If the dragged node is disabled.
            TypeError: If index is not None or an int.
        """
        if self._gestures_blocked(dragged_id, self.draggable):
            return None
        moved = self._gateway.reparent(dragged_id, new_parent_id, index)
        self._notify(NODE_MOVE, dragged_id)
        return moved

    def update_node(self, node_id: str, **fields: Any) -> TreeNode:
        """Update label, icon, disabled, selectable, lazy, has_children or data."""
        node = self._gateway.update_node(node_id, **fields)
        self._notify(NODE_UPDATE, node_id)
        return node

    # ==================== Queries ====================

    def get_node(self, node_id: str) -> TreeNode | None:
        """Get a node by id, or None."""
        return self._store.get(node_id)

    def _nodes_in(self, ids: set[str]) -> list[TreeNode]:
        return [node for node, _ in self._store.walk() if node.id in ids]

    def get_selected_nodes(self) -> list[TreeNode]:
        """Selected nodes in tree order."""
        return self._nodes_in(self._state.selected_ids)

    def get_checked_nodes(self) -> list[TreeNode]:
        """Checked nodes in tree order."""
        return self._nodes_in(self._state.checked_ids)

    def get_expanded_nodes(self) -> list[TreeNode]:
        """Expanded nodes in tree order."""
        return self._nodes_in(self._state.expanded_ids)

    def get_visible_rows(self) -> list[TreeRow]:
        """Flatten the tree into the rows a renderer should draw.

        Recomputed in full on every call from the current tree, expanded
        set and search term.
        """
        state = self._state
        resolver = VisibilityResolver(self._store, state.expanded_ids, state.search_term)
        indeterminate = self._coordinator.indeterminate_ids()
        rows = []
        for node, depth in resolver.rows():
            forced_open = resolver.search_active and any(
                resolver.is_search_matched(child.id) for child in node.children
            )
            rows.append(TreeRow(
                id=node.id,
                label=node.label,
                depth=depth,
                icon=node.icon,
                is_expanded=node.id in state.expanded_ids or forced_open,
                is_leaf=node.is_leaf,
                is_selected=node.id in state.selected_ids,
                is_checked=node.id in state.checked_ids,
                is_indeterminate=node.id in indeterminate,
                is_search_match=resolver.is_direct_match(node.id),
                is_disabled=node.disabled,
                is_loading=self.is_pending(node.id),
            ))
        return rows
