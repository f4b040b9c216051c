# src/taskminder/tasks/task_queue.py

"""
Priority-ordered task queue.

An indexed binary min-heap over TaskRecord references:
- ordering key is (priority rank, created_time, insertion sequence),
- an index map (task reference -> heap slot) gives O(log n) removal by identity.

Not thread-safe on its own: ReminderScheduler serializes every access.
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime

from ..errors import EmptyQueueError, NotFoundError
from .task_models import TaskPriority, TaskRecord

logger = logging.getLogger(__name__)

_Key = tuple[int, datetime, int]


class PriorityOrderedQueue:
    """Highest priority first; FIFO by created_time within a priority band."""

    __slots__ = ("_heap", "_index", "_seq")

    def __init__(self) -> None:
        self._heap: list[tuple[_Key, TaskRecord]] = []
        self._index: dict[TaskRecord, int] = {}
        self._seq = itertools.count()

    # ---- public API ----

    def insert(self, task: TaskRecord) -> None:
        if task in self._index:
            logger.debug("Task %s already queued; insert ignored", task.id)
            return
        self._heap.append((self._key(task), task))
        pos = len(self._heap) - 1
        self._index[task] = pos
        self._sift_up(pos)

    def peek_highest(self) -> TaskRecord:
        if not self._heap:
            raise EmptyQueueError("task queue is empty")
        return self._heap[0][1]

    def pop_highest(self) -> TaskRecord:
        if not self._heap:
            raise EmptyQueueError("task queue is empty")
        return self._remove_at(0)

    def remove(self, task: TaskRecord) -> bool:
        pos = self._index.get(task)
        if pos is None:
            return False
        self._remove_at(pos)
        return True

    def update_priority(self, task: TaskRecord, new_priority: TaskPriority | str) -> bool:
        """
        Change a queued task's priority and restore ordering.

        The task leaves the heap before its priority changes, so the heap never holds
        an entry whose cached key disagrees with the task. Returns False (and leaves
        the task untouched) when it is not queued.
        """
        if task not in self._index:
            return False
        new_priority = TaskPriority.coerce(new_priority)
        self.remove(task)
        task.priority = new_priority
        self.insert(task)
        return True

    def replace(self, task: TaskRecord) -> None:
        """Re-seat a queued task after an external change to its ordering fields."""
        if task not in self._index:
            raise NotFoundError(f"task {task.id} is not in the queue")
        self.remove(task)
        self.insert(task)

    def size(self) -> int:
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def clear(self) -> None:
        self._heap.clear()
        self._index.clear()

    def snapshot(self) -> list[TaskRecord]:
        """All queued tasks in unspecified order (a fresh list)."""
        return [task for _, task in self._heap]

    def ordered(self) -> list[TaskRecord]:
        """All queued tasks in pop order, without touching the heap."""
        return [task for _, task in sorted(self._heap, key=lambda e: e[0])]

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, task: object) -> bool:
        return task in self._index

    def __iter__(self):
        return iter(self.ordered())

    # ---- heap internals ----

    def _key(self, task: TaskRecord) -> _Key:
        rank, created = task.sort_key()
        return (rank, created, next(self._seq))

    def _remove_at(self, pos: int) -> TaskRecord:
        heap = self._heap
        _, task = heap[pos]
        del self._index[task]

        last = heap.pop()
        if pos < len(heap):
            heap[pos] = last
            self._index[last[1]] = pos
            # The moved entry may belong above or below its new slot.
            if pos > 0 and last[0] < heap[(pos - 1) // 2][0]:
                self._sift_up(pos)
            else:
                self._sift_down(pos)
        return task

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        self._index[heap[i][1]] = i
        self._index[heap[j][1]] = j

    def _sift_up(self, pos: int) -> None:
        heap = self._heap
        while pos > 0:
            parent = (pos - 1) // 2
            if heap[pos][0] < heap[parent][0]:
                self._swap(pos, parent)
                pos = parent
            else:
                break

    def _sift_down(self, pos: int) -> None:
        heap = self._heap
        n = len(heap)
        while True:
            left = 2 * pos + 1
            if left >= n:
                break
            smallest = left
            right = left + 1
            if right < n and heap[right][0] < heap[left][0]:
                smallest = right
            if heap[smallest][0] < heap[pos][0]:
                self._swap(pos, smallest)
                pos = smallest
            else:
                break
