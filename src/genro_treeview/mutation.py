# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Structural edits that keep view state consistent with the tree.

The gateway wraps NodeStore mutations and repairs the TreeState after each
one: removed ids leave every membership set, check aggregates are refreshed,
pending lazy loads of removed nodes are cancelled. Every operation validates
before touching anything, so a failing call leaves store and state as they
were.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import CycleError, DisabledNodeError
from .lazy import LazyLoad
from .node import TreeNode
from .selection import SelectionCoordinator
from .state import TreeState
from .store import NodeStore, check_index, load_nodes

logger = logging.getLogger(__name__)


class MutationGateway:
    """Applies add / remove / reparent / update and lazy loads to a NodeStore."""

    __slots__ = ('_store', '_state', '_coordinator', '_pending')

    def __init__(
        self,
        store: NodeStore,
        state: TreeState,
        coordinator: SelectionCoordinator,
    ) -> None:
        self._store = store
        self._state = state
        self._coordinator = coordinator
        self._pending: dict[str, LazyLoad] = {}

    # ==================== Structure ====================

    def add_node(
        self,
        parent_id: str | None,
        node: TreeNode | dict[str, Any],
        index: int | None = None,
    ) -> TreeNode:
        """Insert a node under parent_id without expanding the parent.

        Args:
            parent_id: Id of the parent, or None for the root level.
            node: TreeNode or node dict (with optional children).
            index: Position among the siblings; None appends.

        Returns:
            The inserted TreeNode.

        Raises:
            NotFoundError: If parent_id is not in the store.
            DuplicateIdError: If an id of the new subtree already exists.
        """
        inserted = self._store.insert_child(parent_id, node, index)
        # a new unchecked child un-checks a fully checked parent
        self._coordinator.reaggregate(parent_id)
        logger.info("Added node %s under %s", inserted.id, parent_id)
        return inserted

    def remove_node(self, node_id: str) -> list[str]:
        """Remove a node with its subtree and purge their ids from the state.

        Former ancestors lose their full-checked status; whatever remains
        checked below them shows as indeterminate.

        Returns:
            Ids of all removed nodes, pre-order.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        removed = self._store.subtree_ids(node_id)
        parent_id = self._store.parent_id_of(node_id)
        self._store.remove(node_id)
        self._state.purge(removed)
        self._coordinator.strip_ancestors(parent_id)
        self._cancel_loads(removed)
        logger.info("Removed node %s (%d node(s))", node_id, len(removed))
        return removed

    def reparent(
        self,
        dragged_id: str,
        new_parent_id: str | None,
        index: int | None = None,
    ) -> TreeNode:
        """Move a subtree under a new parent (drag and drop).

        The subtree keeps its internal structure and every expanded or
        checked membership of the nodes inside it.

        Args:
            dragged_id: Root of the subtree to move.
            new_parent_id: Target parent id, or None for the root level.
            index: Position among the target's children, counted after the
                dragged node left its old place. None appends.

        Returns:
            The moved TreeNode.

        Raises:
            NotFoundError: If either id is not in the store.
            CycleError: If new_parent_id is dragged_id or one of its descendants.
            DisabledNodeError: If the dragged node is disabled.
            TypeError: If index is not None or an int.
        """
        node = self._store.find_by_id(dragged_id)
        if new_parent_id is not None:
            self._store.find_by_id(new_parent_id)
            if new_parent_id == dragged_id or dragged_id in self._store.path_to_root(new_parent_id):
                raise CycleError(dragged_id, new_parent_id)
        if node.disabled:
            raise DisabledNodeError(dragged_id)
        check_index(index)

        old_parent_id = self._store.parent_id_of(dragged_id)
        subtree = self._store.detach(dragged_id)
        self._store.insert_child(new_parent_id, subtree, index)
        if old_parent_id != new_parent_id:
            self._coordinator.strip_ancestors(old_parent_id)
            self._coordinator.reaggregate(new_parent_id)
        logger.info(
            "Moved node %s from %s to %s at %s",
            dragged_id, old_parent_id, new_parent_id, index,
        )
        return subtree

    def expand_to_node(self, node_id: str) -> bool:
        """Expand every ancestor of a node so the node becomes visible.

        Returns:
            True if expanded_ids changed.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        missing = set(self._store.path_to_root(node_id)) - self._state.expanded_ids
        self._state.expanded_ids |= missing
        return bool(missing)

    def update_node(self, node_id: str, **fields: Any) -> TreeNode:
        """Change non-structural fields of a node.

        Raises:
            NotFoundError: If node_id is not in the store.
            TypeError: If a field cannot be updated.
        """
        node = self._store.find_by_id(node_id)
        node.update(**fields)
        return node

    # ==================== Lazy loading ====================

    def pending_load(self, node_id: str) -> LazyLoad | None:
        """Return the in-flight load for a node, if any."""
        return self._pending.get(node_id)

    def track_load(self, load: LazyLoad) -> None:
        """Register a newly issued load as pending."""
        self._pending[load.node_id] = load
        logger.debug("Lazy load issued for %s", load.node_id)

    def complete_load(self, load: LazyLoad, children: list[Any]) -> TreeNode:
        """Install fetched children on a lazy node and expand it.

        Children added or moved under the node while the load was pending
        stay in place and the fetched children follow them. A node that was
        checked before it owned any children hands its check to the fetched
        ones; otherwise its aggregate is recomputed.

        Raises:
            NotFoundError: If the node disappeared.
            DuplicateIdError: If the children collide with existing ids.
        """
        node = self._store.find_by_id(load.node_id)
        inherit_check = not node.children and load.node_id in self._state.checked_ids
        fetched = load_nodes(children)
        removed = self._store.replace_children(load.node_id, node.children + fetched)
        node.lazy = False
        self._pending.pop(load.node_id, None)
        self._state.purge(removed)
        self._cancel_loads(removed)
        self._state.expanded_ids.add(load.node_id)
        if inherit_check:
            for child in fetched:
                self._state.checked_ids.update(n.id for n in child.iter_subtree())
        else:
            self._coordinator.reaggregate(load.node_id)
        logger.debug("Lazy load for %s installed %d child(ren)", load.node_id, len(fetched))
        return node

    def abandon_load(self, load: LazyLoad) -> None:
        """Forget a failed load; the node stays lazy so expanding retries."""
        self._pending.pop(load.node_id, None)
        logger.warning("Lazy load for %s failed: %s", load.node_id, load.error)

    def _cancel_loads(self, node_ids: list[str]) -> None:
        for node_id in node_ids:
            load = self._pending.pop(node_id, None)
            if load is not None:
                load.cancel()
                logger.debug("Cancelled lazy load for dropped node %s", node_id)
