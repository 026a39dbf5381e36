from typing import Callable, Iterator, List, Optional, Tuple

from .errors import NotFoundError, OutOfRangeError

# handle used as the "null pointer" of the arena
NIL = -1

class MemoryRegion:
    """Half-open address range [base_address, base_address + length).

    Regions are plain values: two regions are equal iff base and length match.
    """
    __slots__ = ("base_address", "length")

    def __init__(self, base_address:int, length:int):
        if base_address < 0:
            raise ValueError(f"base address must be non-negative, got {base_address}")
        if length <= 0:
            raise ValueError(f"region length must be positive, got {length}")
        object.__setattr__(self, "base_address", base_address)
        object.__setattr__(self, "length", length)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def end(self) -> int:
        return self.base_address + self.length

    def precedes(self, other:'MemoryRegion') -> bool:
        return self.end == other.base_address

    def overlaps(self, other:'MemoryRegion') -> bool:
        return self.base_address < other.end and other.base_address < self.end

    def __eq__(self, other):
        if not isinstance(other, MemoryRegion):
            return NotImplemented
        return self.base_address == other.base_address and self.length == other.length

    def __hash__(self):
        return hash((self.base_address, self.length))

    def __str__(self):
        return f"({self.base_address} , {self.length})"

    def __repr__(self):
        return f"MemoryRegion({self.base_address}, {self.length})"


class _Node:
    __slots__ = ("region", "next")

    def __init__(self, region, next=NIL):
        self.region = region
        self.next = next


class BlockList:
    """Ordered list of MemoryRegion values.

    Nodes are kept in an arena and linked forward by integer handle; head and
    tail handles make insertion at either end O(1). Slots of removed nodes are
    reused by later insertions.
    """

    def __init__(self, regions=()):
        self.nodes:List[Optional[_Node]] = []
        self.free_slots:List[int] = []
        self.head = NIL
        self.tail = NIL
        self._size = 0
        # bumped on every structural change, checked by live iterators
        self.mod_count = 0
        for region in regions:
            self.append_last(region)

    def size(self) -> int:
        return self._size

    def __len__(self):
        return self._size

    def _new_node(self, region) -> int:
        node = _Node(region)
        if self.free_slots:
            handle = self.free_slots.pop()
            self.nodes[handle] = node
        else:
            handle = len(self.nodes)
            self.nodes.append(node)
        return handle

    def _release_node(self, handle):
        self.nodes[handle] = None
        self.free_slots.append(handle)

    def _check_index(self, index, bound):
        if index < 0 or index >= bound:
            raise OutOfRangeError(index, bound)

    def _handle_at(self, index) -> int:
        # caller validates index
        if index == self._size - 1:
            return self.tail
        handle = self.head
        for _ in range(index):
            handle = self.nodes[handle].next
        return handle

    def get(self, index:int) -> MemoryRegion:
        self._check_index(index, self._size)
        return self.nodes[self._handle_at(index)].region

    def __getitem__(self, index:int) -> MemoryRegion:
        return self.get(index)

    def first(self) -> Optional[MemoryRegion]:
        return None if self.head == NIL else self.nodes[self.head].region

    def last(self) -> Optional[MemoryRegion]:
        return None if self.tail == NIL else self.nodes[self.tail].region

    def insert_at(self, index:int, region:MemoryRegion):
        # inserting at size() is allowed, hence the +1
        self._check_index(index, self._size + 1)
        assert isinstance(region, MemoryRegion), f"expect MemoryRegion, got {type(region)}"
        handle = self._new_node(region)
        node = self.nodes[handle]
        if index == 0:
            node.next = self.head
            self.head = handle
            if self._size == 0:
                self.tail = handle
        elif index == self._size:
            self.nodes[self.tail].next = handle
            self.tail = handle
        else:
            prev = self._handle_at(index - 1)
            node.next = self.nodes[prev].next
            self.nodes[prev].next = handle
        self._size += 1
        self.mod_count += 1

    def append_first(self, region:MemoryRegion):
        self.insert_at(0, region)

    def append_last(self, region:MemoryRegion):
        self.insert_at(self._size, region)

    def find(self, predicate:Callable[[MemoryRegion], bool]) -> Tuple[int, Optional[MemoryRegion]]:
        """Single scan returning (index, region) of the first match, or (-1, None)."""
        handle = self.head
        index = 0
        while handle != NIL:
            node = self.nodes[handle]
            if predicate(node.region):
                return index, node.region
            handle = node.next
            index += 1
        return -1, None

    def index_of(self, region:MemoryRegion) -> int:
        index, _ = self.find(lambda r: r == region)
        return index

    def __contains__(self, region):
        return self.index_of(region) >= 0

    def remove_at(self, index:int) -> MemoryRegion:
        self._check_index(index, self._size)
        if index == 0:
            handle = self.head
            self.head = self.nodes[handle].next
            if self.head == NIL:
                self.tail = NIL
        else:
            prev = self._handle_at(index - 1)
            handle = self.nodes[prev].next
            self.nodes[prev].next = self.nodes[handle].next
            if handle == self.tail:
                self.tail = prev
        region = self.nodes[handle].region
        self._release_node(handle)
        self._size -= 1
        self.mod_count += 1
        return region

    def remove_by_value(self, region:MemoryRegion):
        index = self.index_of(region)
        if index < 0:
            raise NotFoundError(f"{region} is not in the list")
        self.remove_at(index)

    def iterate(self) -> Iterator[MemoryRegion]:
        mod_count = self.mod_count
        handle = self.head
        while handle != NIL:
            if self.mod_count != mod_count:
                raise RuntimeError("BlockList changed size during iteration")
            node = self.nodes[handle]
            yield node.region
            handle = node.next

    def __iter__(self):
        return self.iterate()

    def total_length(self) -> int:
        return sum(region.length for region in self.iterate())

    def to_list(self) -> List[MemoryRegion]:
        return list(self.iterate())

    def __str__(self):
        return "".join(f"{region} " for region in self.iterate())

    def __repr__(self):
        return f"BlockList({self.to_list()!r})"
