# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Lazy subtree loading handles.

Expanding a lazy node whose children are not loaded yet issues a LazyLoad.
The caller fetches the children however it likes (thread, event loop,
network) and settles the handle with resolve() or fail(). The engine only
owns the state transitions::

    pending --resolve()--> resolved
    pending --fail()-----> failed      (node stays lazy, next expand retries)
    pending --cancel()---> cancelled   (node removed; late results ignored)

Example:
    >>> load = engine.toggle_expand('remote')
    >>> load.status
    <LoadStatus.PENDING: 'pending'>
    >>> load.resolve([{'id': 'r1', 'label': 'Remote child'}])
    True
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable

from .exceptions import LazyLoadError

logger = logging.getLogger(__name__)

LoadCallback = Callable[['LazyLoad'], Any]


class LoadStatus(str, Enum):
    PENDING = 'pending'
    RESOLVED = 'resolved'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


class LazyLoad:
    """A pending request for the children of one lazy node.

    Attributes:
        node_id: The node whose children are requested.
        status: Current LoadStatus.
        error: The failure reason once failed, else None.
    """

    __slots__ = ('node_id', 'status', 'error', '_apply', '_reject', '_done_callbacks')

    def __init__(
        self,
        node_id: str,
        apply: Callable[[LazyLoad, list[Any]], None],
        reject: Callable[[LazyLoad], None],
    ) -> None:
        """Initialize a LazyLoad.

        Args:
            node_id: Id of the lazy node.
            apply: Called with (load, children) on resolve; installs the children.
            reject: Called with the load on failure.
        """
        self.node_id = node_id
        self.status = LoadStatus.PENDING
        self.error: BaseException | None = None
        self._apply = apply
        self._reject = reject
        self._done_callbacks: list[LoadCallback] = []

    def __repr__(self) -> str:
        return f"LazyLoad({self.node_id!r}, {self.status.value})"

    @property
    def pending(self) -> bool:
        return self.status is LoadStatus.PENDING

    @property
    def done(self) -> bool:
        return self.status is not LoadStatus.PENDING

    def add_done_callback(self, callback: LoadCallback) -> None:
        """Call callback(load) once the load settles (immediately if settled)."""
        if self.done:
            callback(self)
        else:
            self._done_callbacks.append(callback)

    def _settle(self, status: LoadStatus) -> None:
        self.status = status
        callbacks, self._done_callbacks = self._done_callbacks, []
        for callback in callbacks:
            callback(self)

    def _ensure_pending(self, action: str) -> bool:
        """Return False for cancelled loads, raise if already settled."""
        if self.status is LoadStatus.CANCELLED:
            logger.warning("Discarding %s of cancelled load for %s", action, self.node_id)
            return False
        if self.status is not LoadStatus.PENDING:
            raise LazyLoadError(
                f"Cannot {action} load for '{self.node_id}': already {self.status.value}"
            )
        return True

    def resolve(self, children: Iterable[Any]) -> bool:
        """Deliver the fetched children.

        Args:
            children: TreeNode instances or node dicts.

        Returns:
            True if the children were installed, False if the load was
            cancelled in the meantime.

        Raises:
            LazyLoadError: If the load already resolved or failed.
            DuplicateIdError: If the children collide with existing ids;
                the load is then marked failed and the node stays lazy.
        """
        if not self._ensure_pending('resolve'):
            return False
        try:
            self._apply(self, list(children))
        except Exception as exc:
            self.fail(exc)
            raise
        self._settle(LoadStatus.RESOLVED)
        return True

    def fail(self, error: BaseException | None = None) -> bool:
        """Report that fetching the children failed.

        Returns:
            True if the failure was recorded, False if the load was cancelled.

        Raises:
            LazyLoadError: If the load already resolved or failed.
        """
        if not self._ensure_pending('fail'):
            return False
        self.error = error
        self._reject(self)
        self._settle(LoadStatus.FAILED)
        return True

    def cancel(self) -> None:
        """Cancel a pending load; later resolve()/fail() calls become no-ops."""
        if self.pending:
            self._settle(LoadStatus.CANCELLED)
