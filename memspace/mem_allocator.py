from typing import Dict, List

from .block_list import BlockList, MemoryRegion
from .errors import NotFoundError
from .utils import check_enabled, log

# returned by allocate() when no free region is large enough
ALLOC_FAILED = -1

class MemorySpace:
    """First-fit allocator over the simulated address range [0, max_size).

    Free regions are kept unmerged until compact() is called; release() just
    moves a region from the allocated list to the end of the free list.
    """

    def __init__(self, max_size:int):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self.used_size = 0
        self.addr_bound = 0
        self.free_list = BlockList()
        self.allocated_list = BlockList()
        self.free_list.append_last(MemoryRegion(0, max_size))

    @property
    def free_size(self) -> int:
        return self.max_size - self.used_size

    def upper_bound(self) -> int:
        return self.addr_bound

    def allocate(self, length:int) -> int:
        if length <= 0:
            raise ValueError(f"allocation length must be positive, got {length}")

        index, found = self.free_list.find(lambda region: region.length >= length)
        if found is None:
            log(f"allocate({length}) failed, {self.free_size} free in {self.free_list.size()} regions")
            return ALLOC_FAILED

        self.free_list.remove_at(index)
        if found.length > length:
            # the remainder keeps the scan position of the region it was cut from
            self.free_list.insert_at(index, MemoryRegion(found.base_address + length, found.length - length))
        self.allocated_list.append_last(MemoryRegion(found.base_address, length))

        self.used_size += length
        self.addr_bound = max(self.addr_bound, found.base_address + length)
        log(f"allocate({length}) -> {found.base_address}")
        self._auto_check()
        return found.base_address

    def release(self, address:int):
        index, region = self.allocated_list.find(lambda r: r.base_address == address)
        if region is None:
            raise NotFoundError(f"Failed to release, no allocated region at addr {address}")
        self.allocated_list.remove_at(index)
        self.free_list.append_last(region)
        self.used_size -= region.length
        log(f"release({address}) -> {region}")
        self._auto_check()

    def _merge_once(self) -> bool:
        regions = self.free_list.to_list()
        for i, base in enumerate(regions):
            for j, join in enumerate(regions):
                if i == j or not base.precedes(join):
                    continue
                # remove the higher index first so the lower one stays valid
                for k in sorted((i, j), reverse=True):
                    self.free_list.remove_at(k)
                self.free_list.append_last(MemoryRegion(base.base_address, base.length + join.length))
                return True
        return False

    def compact(self) -> int:
        merges = 0
        while self._merge_once():
            merges += 1
        if merges:
            log(f"compact() merged {merges} pairs, {self.free_list.size()} free regions left")
        self._auto_check()
        return merges

    def allocate_or_compact(self, length:int) -> int:
        addr = self.allocate(length)
        if addr == ALLOC_FAILED and self.compact() > 0:
            addr = self.allocate(length)
        return addr

    # names used by the classic malloc/free/defrag interface
    malloc = allocate
    free = release
    defrag = compact

    def regions(self) -> Dict[str, List[MemoryRegion]]:
        return {
            "free": self.free_list.to_list(),
            "allocated": self.allocated_list.to_list(),
        }

    def check_invariants(self):
        free = self.free_list.to_list()
        allocated = self.allocated_list.to_list()
        total = sum(r.length for r in free) + sum(r.length for r in allocated)
        assert total == self.max_size, f"lost memory: {total} accounted of {self.max_size}"
        assert self.used_size == sum(r.length for r in allocated), \
            f"used_size {self.used_size} mismatches allocated list"
        everything = sorted(free + allocated, key=lambda r: r.base_address)
        for prev, cur in zip(everything, everything[1:]):
            assert not prev.overlaps(cur), f"{prev} overlaps {cur}"
        for r in everything:
            assert r.length > 0 and 0 <= r.base_address and r.end <= self.max_size, f"bad region {r}"

    def _auto_check(self):
        if check_enabled():
            self.check_invariants()

    def __str__(self):
        return f"{self.free_list}\n{self.allocated_list}"
