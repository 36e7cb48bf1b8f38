# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""NodeStore - The canonical owned tree behind a tree view.

This module provides the NodeStore class, the single owner of the TreeNode
hierarchy. Every other component of the engine refers to nodes by id only and
asks the store to resolve them, so no stale references survive a mutation.

Key Features:
    - **O(1) lookup**: Internal dict index from id to node and to parent id
    - **Ordered children**: Sibling order is preserved across every mutation
    - **Unique ids**: Insertions that would duplicate an id are rejected
    - **Path computation**: Ancestor chains nearest-first via path_to_root()
    - **Subtree moves**: detach() and insert_child() keep subtrees intact

Example:
    Basic usage::

        store = NodeStore([
            {'id': 'root', 'label': 'Root', 'children': [
                {'id': 'a', 'label': 'A'},
            ]},
        ])
        store.insert_child('root', TreeNode('b', 'B'))
        store.path_to_root('b')  # ['root']
        store.remove('root')     # 3
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from ..exceptions import DuplicateIdError, NotFoundError
from ..node import TreeNode
from .loading import as_node, load_nodes, node_as_dict

NodeSource = Iterable[TreeNode | dict[str, Any]] | dict[str, Any]


def check_index(index: Any) -> None:
    """Reject sibling positions that are neither None nor an int.

    Raises:
        TypeError: If index has another type.
    """
    if index is not None and not isinstance(index, int):
        raise TypeError(f"index must be int or None, not {type(index).__name__}")


class NodeStore:
    """Ordered tree of TreeNode with O(1) lookup by id.

    NodeStore provides:
    - find_by_id(id) / find_parent(id) / path_to_root(id): Lookup
    - insert_child(parent_id, node, index): Insert a subtree
    - remove(id) / detach(id): Remove a subtree
    - replace_children(id, children): Swap a node's children (lazy loads)

    Root-level nodes have no parent; ``parent_id=None`` addresses that level.

    Example:
        >>> store = NodeStore({'id': 'root', 'children': [{'id': 'a'}]})
        >>> store.find_parent('a').id
        'root'
    """

    __slots__ = ('_roots', '_nodes', '_parents')

    def __init__(self, source: NodeSource | NodeStore | None = None) -> None:
        """Initialize a NodeStore.

        Args:
            source: Optional initial data. Can be:
                - list: TreeNode instances or node dicts (root-level nodes)
                - dict: A single root node dict
                - NodeStore: Deep copy of another store

        Raises:
            DuplicateIdError: If the source repeats an id.
        """
        self._roots: list[TreeNode] = []
        self._nodes: dict[str, TreeNode] = {}
        self._parents: dict[str, str | None] = {}

        if source is not None:
            self._load_source(source)

    def _load_source(self, source: NodeSource | NodeStore) -> None:
        """Load root nodes from source.

        Raises:
            TypeError: If source is not a list, dict, or NodeStore.
        """
        if isinstance(source, NodeStore):
            nodes = load_nodes(source.as_list())
        elif isinstance(source, (list, tuple, dict)):
            nodes = load_nodes(source)
        else:
            raise TypeError(
                f"source must be list, dict, or NodeStore, not {type(source).__name__}"
            )
        for node in nodes:
            self.insert_child(None, node)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"NodeStore({[node.id for node in self._roots]}, size={len(self._nodes)})"

    def __len__(self) -> int:
        """Return the total number of nodes in the tree."""
        return len(self._nodes)

    def __iter__(self) -> Iterator[TreeNode]:
        """Iterate over root-level nodes in order."""
        return iter(self._roots)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    @property
    def roots(self) -> list[TreeNode]:
        """Root-level nodes in order (a copy)."""
        return list(self._roots)

    # ==================== Lookup ====================

    def find_by_id(self, node_id: str) -> TreeNode:
        """Get the node with the given id.

        Raises:
            NotFoundError: If no node has this id.
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NotFoundError(node_id) from None

    def get(self, node_id: str, default: Any = None) -> TreeNode | None:
        """Get node by id, with default instead of raising."""
        return self._nodes.get(node_id, default)

    def find_parent(self, node_id: str) -> TreeNode | None:
        """Get the parent node, or None for root-level nodes.

        Raises:
            NotFoundError: If no node has this id.
        """
        if node_id not in self._parents:
            raise NotFoundError(node_id)
        parent_id = self._parents[node_id]
        return None if parent_id is None else self._nodes[parent_id]

    def parent_id_of(self, node_id: str) -> str | None:
        """Get the parent id, or None for root-level nodes."""
        if node_id not in self._parents:
            raise NotFoundError(node_id)
        return self._parents[node_id]

    def path_to_root(self, node_id: str) -> list[str]:
        """Return the ancestor ids of a node, nearest first.

        Args:
            node_id: The node whose ancestry is wanted.

        Returns:
            List of ids from the parent up to the root-level ancestor.
            Empty for root-level nodes.

        Raises:
            NotFoundError: If no node has this id.

        Example:
            >>> store.path_to_root('A1')
            ['A', 'root']
        """
        if node_id not in self._parents:
            raise NotFoundError(node_id)
        path = []
        parent_id = self._parents[node_id]
        while parent_id is not None:
            path.append(parent_id)
            parent_id = self._parents[parent_id]
        return path

    def depth_of(self, node_id: str) -> int:
        """Structural depth of a node (root level = 0)."""
        return len(self.path_to_root(node_id))

    def children_of(self, parent_id: str | None) -> list[TreeNode]:
        """Children of a node (root-level nodes for None), as a copy."""
        return list(self._siblings(parent_id))

    def index_of(self, node_id: str) -> int:
        """Position of a node among its siblings."""
        siblings = self._siblings(self.parent_id_of(node_id))
        for i, node in enumerate(siblings):
            if node.id == node_id:
                return i
        raise NotFoundError(node_id)

    def _siblings(self, parent_id: str | None) -> list[TreeNode]:
        """Return the live children list addressed by parent_id."""
        if parent_id is None:
            return self._roots
        return self.find_by_id(parent_id).children

    # ==================== Structure ====================

    def _check_ids(self, nodes: Iterable[TreeNode], replacing: set[str] = frozenset()) -> None:
        """Validate that nodes introduce no duplicate id.

        Args:
            nodes: Subtree roots about to be inserted.
            replacing: Ids leaving the store in the same operation.

        Raises:
            DuplicateIdError: On the first id already present or repeated.
        """
        seen: set[str] = set()
        for root in nodes:
            for node in root.iter_subtree():
                if node.id in seen or (node.id in self._nodes and node.id not in replacing):
                    raise DuplicateIdError(node.id)
                seen.add(node.id)

    def _register(self, node: TreeNode, parent_id: str | None) -> None:
        """Index a subtree under parent_id."""
        self._nodes[node.id] = node
        self._parents[node.id] = parent_id
        for child in node.children:
            self._register(child, node.id)

    def _unregister(self, node: TreeNode) -> list[str]:
        """Drop a subtree from the index, returning the removed ids."""
        removed = []
        for descendant in node.iter_subtree():
            del self._nodes[descendant.id]
            del self._parents[descendant.id]
            removed.append(descendant.id)
        return removed

    def insert_child(
        self,
        parent_id: str | None,
        node: TreeNode | dict[str, Any],
        index: int | None = None,
    ) -> TreeNode:
        """Insert a node (with its subtree) among the children of parent_id.

        Args:
            parent_id: Id of the new parent, or None for the root level.
            node: TreeNode or node dict.
            index: Position among the siblings (list.insert semantics).
                None appends at the end.

        Returns:
            The inserted TreeNode.

        Raises:
            NotFoundError: If parent_id is not in the store.
            DuplicateIdError: If the subtree would introduce a duplicate id.
            TypeError: If index is not None or an int.
        """
        check_index(index)
        siblings = self._siblings(parent_id)
        node = as_node(node)
        self._check_ids([node])
        if index is None:
            siblings.append(node)
        else:
            siblings.insert(index, node)
        self._register(node, parent_id)
        return node

    def detach(self, node_id: str) -> TreeNode:
        """Remove a subtree from the store and return it intact.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        node = self.find_by_id(node_id)
        self._siblings(self._parents[node_id]).remove(node)
        self._unregister(node)
        return node

    def remove(self, node_id: str) -> int:
        """Remove a node and its entire subtree.

        Callers owning view state (expanded, selected, checked ids) must
        purge the removed ids themselves.

        Returns:
            Number of nodes removed.

        Raises:
            NotFoundError: If node_id is not in the store.
        """
        node = self.find_by_id(node_id)
        self._siblings(self._parents[node_id]).remove(node)
        return len(self._unregister(node))

    def replace_children(
        self, node_id: str, children: Iterable[TreeNode | dict[str, Any]]
    ) -> list[str]:
        """Replace the children of a node.

        Used when a lazy subtree finishes loading. Current children passed
        back in the new list stay in the store with their subtrees.

        Returns:
            Ids of the descendants that left the store.

        Raises:
            NotFoundError: If node_id is not in the store.
            DuplicateIdError: If the new children would duplicate an id.
        """
        node = self.find_by_id(node_id)
        new_children = load_nodes(children)
        self._check_ids(new_children, replacing=set(self.descendant_ids(node_id)))

        outgoing: list[str] = []
        for child in node.children:
            outgoing.extend(self._unregister(child))
        node.children = new_children
        for child in new_children:
            self._register(child, node_id)
        return [child_id for child_id in outgoing if child_id not in self._nodes]

    # ==================== Walk ====================

    def walk(self) -> Iterator[tuple[TreeNode, int]]:
        """Yield (node, depth) pairs in pre-order."""
        def _walk_gen(nodes: list[TreeNode], depth: int) -> Iterator[tuple[TreeNode, int]]:
            for node in nodes:
                yield node, depth
                yield from _walk_gen(node.children, depth + 1)

        return _walk_gen(self._roots, 0)

    def subtree_ids(self, node_id: str) -> list[str]:
        """Ids of a node and all its descendants, pre-order."""
        return [node.id for node in self.find_by_id(node_id).iter_subtree()]

    def descendant_ids(self, node_id: str) -> list[str]:
        """Ids of all descendants of a node, pre-order."""
        return self.subtree_ids(node_id)[1:]

    def all_ids(self) -> list[str]:
        """All ids in pre-order."""
        return [node.id for node, _ in self.walk()]

    # ==================== Conversion ====================

    def as_list(self) -> list[dict[str, Any]]:
        """Convert the tree to a list of plain node dicts (recursive)."""
        return [node_as_dict(node) for node in self._roots]
