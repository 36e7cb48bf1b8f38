# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""View state of a tree: expansion, selection, checks and search term."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class TreeStateSnapshot:
    """Immutable copy of a TreeState, ids only.

    Carried by every engine event so a renderer can diff against
    its previous render.
    """

    expanded_ids: frozenset[str] = frozenset()
    selected_ids: frozenset[str] = frozenset()
    checked_ids: frozenset[str] = frozenset()
    search_term: str = ''


class TreeState:
    """Mutable view state owned by the engine.

    Indeterminate check status is not stored: it is derived from
    checked_ids and the tree on every read.
    """

    __slots__ = ('expanded_ids', 'selected_ids', 'checked_ids', 'search_term')

    def __init__(self) -> None:
        self.expanded_ids: set[str] = set()
        self.selected_ids: set[str] = set()
        self.checked_ids: set[str] = set()
        self.search_term: str = ''

    def __repr__(self) -> str:
        return (
            f"TreeState(expanded={sorted(self.expanded_ids)}, "
            f"selected={sorted(self.selected_ids)}, "
            f"checked={sorted(self.checked_ids)}, search={self.search_term!r})"
        )

    def snapshot(self) -> TreeStateSnapshot:
        """Return a frozen copy of the current state."""
        return TreeStateSnapshot(
            expanded_ids=frozenset(self.expanded_ids),
            selected_ids=frozenset(self.selected_ids),
            checked_ids=frozenset(self.checked_ids),
            search_term=self.search_term,
        )

    def purge(self, node_ids: Iterable[str]) -> None:
        """Drop ids from every membership set."""
        ids = set(node_ids)
        self.expanded_ids -= ids
        self.selected_ids -= ids
        self.checked_ids -= ids
