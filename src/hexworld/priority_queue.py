"""Bucket priority queue for hex-graph searches.

Search priorities are small non-negative integers (distance plus a
heuristic), so an array of buckets indexed by priority beats a binary
heap.  Each bucket holds a singly-linked chain threaded through the
nodes' ``next_with_same_priority`` attribute; ties pop most-recent-first.

Nodes must expose:

- ``search_priority`` — current integer priority (read on enqueue)
- ``next_with_same_priority`` — writable chain pointer
"""

from __future__ import annotations

import math
from typing import Any, List, Optional


class CellPriorityQueue:
    """Integer-keyed bucket queue with decrease-key.

    The minimum cursor never moves backwards during a search except
    when a lower priority is enqueued, so :meth:`dequeue` is amortised
    O(1).  Call :meth:`clear` before reusing the queue for a new search.
    """

    def __init__(self) -> None:
        self._buckets: List[Optional[Any]] = []
        self._count = 0
        self._minimum: float = math.inf

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    @property
    def minimum(self) -> float:
        """Cursor position (``inf`` when cleared)."""
        return self._minimum

    def enqueue(self, node: Any) -> None:
        """Push *node* onto the bucket for its current priority."""
        priority = node.search_priority
        if priority < 0:
            raise ValueError(f"Priority must be >= 0, got {priority}")
        self._count += 1
        if priority < self._minimum:
            self._minimum = priority
        if priority >= len(self._buckets):
            self._buckets.extend([None] * (priority + 1 - len(self._buckets)))
        node.next_with_same_priority = self._buckets[priority]
        self._buckets[priority] = node

    def dequeue(self) -> Optional[Any]:
        """Pop a node with the lowest priority, or ``None`` when empty."""
        if self._count == 0:
            return None
        minimum = int(self._minimum)
        while minimum < len(self._buckets):
            node = self._buckets[minimum]
            if node is not None:
                self._buckets[minimum] = node.next_with_same_priority
                node.next_with_same_priority = None
                self._minimum = minimum
                self._count -= 1
                return node
            minimum += 1
        self._minimum = minimum
        return None

    def change(self, node: Any, old_priority: int) -> None:
        """Move *node* from the *old_priority* bucket to its current priority.

        *node* must be enqueued at *old_priority*; anything else is a
        caller error.
        """
        current = self._buckets[old_priority]
        following = current.next_with_same_priority
        if current is node:
            self._buckets[old_priority] = following
        else:
            while following is not node:
                current = following
                following = current.next_with_same_priority
            current.next_with_same_priority = node.next_with_same_priority
        self.enqueue(node)
        self._count -= 1

    def clear(self) -> None:
        self._buckets.clear()
        self._count = 0
        self._minimum = math.inf

    def __repr__(self) -> str:
        return f"CellPriorityQueue(count={self._count}, buckets={len(self._buckets)})"
