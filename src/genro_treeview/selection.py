# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Selection and tri-state check coordination.

Selection is a plain id set (at most one id unless multi-select). Checks are
tri-state: checked, unchecked, or indeterminate. Only *checked* is stored;
indeterminate is always derived as "has a checked descendant but is not
itself checked", so it can never drift out of sync with the checked set.

Check propagation on set_checked(id, value):
    1. The node and all its descendants are forced to value.
    2. Ancestors are recomputed one level at a time: a parent is checked
       iff all its children are checked, otherwise it is removed from the
       checked set (and reads as indeterminate if something below is checked).
    3. Ascending stops at the first ancestor whose membership is unchanged.
"""

from __future__ import annotations

import logging

from .exceptions import DisabledNodeError
from .state import TreeState
from .store import NodeStore

logger = logging.getLogger(__name__)


class SelectionCoordinator:
    """Selection and check rules layered on a NodeStore and a TreeState.

    Attributes:
        multiple: Multi-select mode; select() toggles instead of replacing.
        raise_on_error: If True, set_checked() on a disabled node raises
            DisabledNodeError; otherwise it is a silent no-op.
    """

    __slots__ = ('_store', '_state', 'multiple', 'raise_on_error')

    def __init__(
        self,
        store: NodeStore,
        state: TreeState,
        multiple: bool = False,
        raise_on_error: bool = True,
    ) -> None:
        self._store = store
        self._state = state
        self.multiple = multiple
        self.raise_on_error = raise_on_error

    # ==================== Selection ====================

    def select(self, node_id: str) -> bool:
        """Select a node, or toggle it in multi-select mode.

        Disabled and non-selectable nodes are ignored.

        Returns:
            True if the selected set changed.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        node = self._store.find_by_id(node_id)
        if node.disabled or node.selectable is False:
            logger.debug("select ignored on %s (disabled or not selectable)", node_id)
            return False

        selected = self._state.selected_ids
        if self.multiple:
            if node_id in selected:
                selected.discard(node_id)
            else:
                selected.add(node_id)
            return True

        if selected == {node_id}:
            return False
        selected.clear()
        selected.add(node_id)
        return True

    def select_all(self) -> bool:
        """Select every enabled, selectable node (multi-select mode only).

        Returns:
            True if the selected set changed.
        """
        if not self.multiple:
            return False
        wanted = {
            node.id for node, _ in self._store.walk()
            if not node.disabled and node.selectable is not False
        }
        if wanted <= self._state.selected_ids:
            return False
        self._state.selected_ids |= wanted
        return True

    def deselect_all(self) -> bool:
        """Clear the selection; return True if it was not empty."""
        if not self._state.selected_ids:
            return False
        self._state.selected_ids.clear()
        return True

    # ==================== Checks ====================

    def set_checked(self, node_id: str, checked: bool) -> bool:
        """Check or uncheck a node, cascading down and re-aggregating up.

        Args:
            node_id: The node to check.
            checked: New check value.

        Returns:
            True if the checked set changed.

        Raises:
            NotFoundError: If node_id is not in the store.
            DisabledNodeError: If the node is disabled and raise_on_error is set.
        """
        node = self._store.find_by_id(node_id)
        if node.disabled:
            if self.raise_on_error:
                raise DisabledNodeError(node_id)
            logger.debug("set_checked ignored on disabled node %s", node_id)
            return False

        checked_ids = self._state.checked_ids
        before = len(checked_ids)
        subtree = {descendant.id for descendant in node.iter_subtree()}
        if checked:
            changed = not subtree <= checked_ids
            checked_ids |= subtree
        else:
            changed = not subtree.isdisjoint(checked_ids)
            checked_ids -= subtree
        logger.debug(
            "set_checked %s=%s cascaded to %d node(s), %d -> %d checked",
            node_id, checked, len(subtree), before, len(checked_ids),
        )

        if self.reaggregate(self._store.parent_id_of(node_id)):
            changed = True
        return changed

    def reaggregate(self, node_id: str | None) -> bool:
        """Recompute the checked status of node_id and its ancestors.

        Walks up one level at a time and stops at the first node whose
        membership does not change.

        Returns:
            True if any membership changed.
        """
        changed = False
        while node_id is not None:
            if not self._aggregate(node_id):
                break
            changed = True
            node_id = self._store.parent_id_of(node_id)
        return changed

    def _aggregate(self, node_id: str) -> bool:
        """Derive one node's membership from its children; True if it changed."""
        node = self._store.find_by_id(node_id)
        if not node.children:
            return False
        checked_ids = self._state.checked_ids
        was_checked = node_id in checked_ids
        all_checked = all(child.id in checked_ids for child in node.children)
        if all_checked:
            checked_ids.add(node_id)
        else:
            checked_ids.discard(node_id)
        return all_checked != was_checked

    def strip_ancestors(self, node_id: str | None) -> None:
        """Drop full-checked status from node_id and all its ancestors.

        Used after a child leaves a parent: the parent's aggregate was
        computed over a child set that no longer exists.
        """
        checked_ids = self._state.checked_ids
        while node_id is not None:
            checked_ids.discard(node_id)
            node_id = self._store.parent_id_of(node_id)

    def check_all(self) -> bool:
        """Check every node; return True if the checked set changed."""
        all_ids = set(self._store.all_ids())
        if all_ids <= self._state.checked_ids:
            return False
        self._state.checked_ids |= all_ids
        return True

    def uncheck_all(self) -> bool:
        """Uncheck every node; return True if the checked set was not empty."""
        if not self._state.checked_ids:
            return False
        self._state.checked_ids.clear()
        return True

    # ==================== Derived check state ====================

    def is_checked(self, node_id: str) -> bool:
        """True if node_id is in the checked set.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        self._store.find_by_id(node_id)
        return node_id in self._state.checked_ids

    def is_fully_checked(self, node_id: str) -> bool:
        """Alias of is_checked: a node in the checked set is fully checked."""
        return self.is_checked(node_id)

    def has_checked_descendant(self, node_id: str) -> bool:
        checked_ids = self._state.checked_ids
        return any(
            descendant_id in checked_ids
            for descendant_id in self._store.descendant_ids(node_id)
        )

    def is_indeterminate(self, node_id: str) -> bool:
        """True if something below the node is checked but the node is not."""
        return self.has_checked_descendant(node_id) and not self.is_fully_checked(node_id)

    def indeterminate_ids(self) -> set[str]:
        """All indeterminate ids, computed in one bottom-up pass."""
        checked_ids = self._state.checked_ids
        result: set[str] = set()

        def _visit(node) -> bool:
            # returns whether node or something below it is checked
            below = False
            for child in node.children:
                if _visit(child):
                    below = True
            if below and node.id not in checked_ids:
                result.add(node.id)
            return below or node.id in checked_ids

        for root in self._store:
            _visit(root)
        return result
