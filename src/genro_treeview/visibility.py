# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Visibility resolution - Flattening a tree into rendered rows.

Given a NodeStore, the set of expanded ids and a search term, the resolver
produces the ordered list of (node, depth) pairs that should be rendered.

Rules:
    - A node is *search-matched* when the term is empty, when its label
      contains the term (case-insensitive), or when any descendant is
      search-matched.
    - A node is *visible* when it is search-matched and every ancestor is
      expanded. While a search is active, ancestors of matched nodes count
      as expanded without touching the expanded set, so clearing the search
      restores the previous rows exactly.
    - Rows come in pre-order at the node's structural depth.

Resolution is a full recompute every time; trees rendered by a UI are small
enough for this to stay cheap.

Example:
    >>> rows = resolve_visible(store, {'root'}, '')
    >>> [(node.id, depth) for node, depth in rows]
    [('root', 0), ('A', 1), ('B', 1)]
"""

from __future__ import annotations

from typing import AbstractSet

from .node import TreeNode
from .store import NodeStore


class VisibilityResolver:
    """One resolution pass over a store.

    Matching is computed once at construction (bottom-up, O(n));
    rows() and the query methods reuse it.
    """

    __slots__ = ('_store', '_expanded', '_term', '_matched', '_direct')

    def __init__(
        self,
        store: NodeStore,
        expanded_ids: AbstractSet[str],
        search_term: str = '',
    ) -> None:
        self._store = store
        self._expanded = expanded_ids
        self._term = search_term.lower()
        self._matched: set[str] = set()
        self._direct: set[str] = set()
        for root in store:
            self._compute_matches(root)

    @property
    def search_active(self) -> bool:
        return bool(self._term)

    def _compute_matches(self, node: TreeNode) -> bool:
        """Fill the match sets for a subtree; return whether node matched."""
        descendant_matched = False
        for child in node.children:
            # no short-circuit: every child subtree must be visited
            if self._compute_matches(child):
                descendant_matched = True
        direct = bool(self._term) and self._term in node.label.lower()
        if direct:
            self._direct.add(node.id)
        if not self._term or direct or descendant_matched:
            self._matched.add(node.id)
            return True
        return False

    def is_search_matched(self, node_id: str) -> bool:
        """True if the node or one of its descendants matches the search."""
        return node_id in self._matched

    def is_direct_match(self, node_id: str) -> bool:
        """True if the node's own label contains the active search term."""
        return node_id in self._direct

    def direct_matches(self) -> list[TreeNode]:
        """Nodes whose own label matches the search term, in pre-order."""
        return [node for node, _ in self._store.walk() if node.id in self._direct]

    def rows(self) -> list[tuple[TreeNode, int]]:
        """Return the visible (node, depth) pairs in render order."""
        result: list[tuple[TreeNode, int]] = []
        self._collect(self._store.roots, 0, result)
        return result

    def _collect(
        self,
        nodes: list[TreeNode],
        depth: int,
        result: list[tuple[TreeNode, int]],
    ) -> None:
        for node in nodes:
            if node.id not in self._matched:
                continue
            result.append((node, depth))
            # while searching, every matched node's ancestors are forced open
            if node.id in self._expanded or self._term:
                self._collect(node.children, depth + 1, result)


def resolve_visible(
    store: NodeStore,
    expanded_ids: AbstractSet[str],
    search_term: str = '',
) -> list[tuple[TreeNode, int]]:
    """Flatten a store into visible (node, depth) rows.

    Args:
        store: The node tree.
        expanded_ids: Ids of expanded nodes.
        search_term: Filter string; empty disables filtering.

    Returns:
        Ordered list of (node, depth) pairs.
    """
    return VisibilityResolver(store, expanded_ids, search_term).rows()
