"""
Two-sided stack for iterative depth-first traversals.

Both stacks share one fixed-size array.
The *pending* stack grows up from the front, and holds the traversal's work-list.
The *finished* stack grows down from the back, and collects nodes as they are finalized.
Reading the finished stack from its top yields nodes in reverse finalize-order,
which for a dependency graph is an elimination order.
"""

from typing import Iterator, List, Optional
from enum import Enum, auto

from .errors import StackError


class Visit(Enum):
    discover = auto()
    finalize = auto()


class StackVal(object):
    """ Tagged stack entry.
    Pending `finalize` entries also carry `pos`,
    the offset into the node's column where its traversal resumes.
    `pos` is search state, not identity: equality and hashing ignore it,
    so `finalize(3, pos=2) == finalize(3)`. """

    __slots__ = ('kind', 'index', 'pos')

    def __init__(self, kind: Visit, index: int, pos: int = 0):
        self.kind = kind
        self.index = index
        self.pos = pos

    @classmethod
    def discover(cls, index: int) -> "StackVal":
        return cls(Visit.discover, index)

    @classmethod
    def finalize(cls, index: int, pos: int = 0) -> "StackVal":
        return cls(Visit.finalize, index, pos)

    def __eq__(self, other):
        if not isinstance(other, StackVal): return NotImplemented
        return self.kind is other.kind and self.index == other.index

    def __hash__(self):
        return hash((self.kind, self.index))

    def __repr__(self):
        return f"<{self.kind.name}({self.index})>"


class DependencyStack(object):
    def __init__(self, capacity: int):
        StackError.assert_true(capacity >= 0, "negative capacity")
        self.stacks: List[Optional[StackVal]] = [None] * capacity
        self.left_head = 0  # Pending entries live in stacks[:left_head]
        self.right_head = capacity  # Finished entries live in stacks[right_head:]

    @classmethod
    def with_capacity(cls, capacity: int) -> "DependencyStack":
        return cls(capacity)

    @property
    def capacity(self) -> int:
        return len(self.stacks)

    def __len__(self):
        return self.left_head + (self.capacity - self.right_head)

    def __repr__(self):
        return f"<{self.__class__.__name__}(pending={self.left_head}, finished={self.capacity - self.right_head}, capacity={self.capacity})>"

    def is_pending_empty(self) -> bool:
        return self.left_head == 0

    def is_finished_empty(self) -> bool:
        return self.right_head == self.capacity

    def is_empty(self) -> bool:
        return self.is_pending_empty() and self.is_finished_empty()

    def push_pending(self, val: StackVal):
        StackError.assert_true(self.left_head < self.right_head, f"{self} is full")
        self.stacks[self.left_head] = val
        self.left_head += 1

    def pop_pending(self) -> Optional[StackVal]:
        """ Pop the top pending entry, or return None if there are none """
        if self.left_head == 0:
            return None
        self.left_head -= 1
        val = self.stacks[self.left_head]
        self.stacks[self.left_head] = None
        return val

    def push_finished(self, val: StackVal):
        StackError.assert_true(self.left_head < self.right_head, f"{self} is full")
        self.right_head -= 1
        self.stacks[self.right_head] = val

    def iter_finished(self) -> Iterator[StackVal]:
        """ Finished entries, most recently pushed first """
        for k in range(self.right_head, self.capacity):
            yield self.stacks[k]

    def finished_indices(self) -> Iterator[int]:
        for val in self.iter_finished():
            yield val.index

    def clear(self):
        """ Empty both stacks, keeping our capacity """
        for k in range(self.left_head):
            self.stacks[k] = None
        for k in range(self.right_head, self.capacity):
            self.stacks[k] = None
        self.left_head = 0
        self.right_head = self.capacity
