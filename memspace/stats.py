import numpy as np

class FragmentationStats:
    """Snapshot of how fragmented the free list of a MemorySpace is."""

    def __init__(self, space):
        # lengths stay python ints, address ranges may exceed int64
        self.free_lengths = np.array([r.length for r in space.free_list], dtype=object)
        self.allocated_lengths = np.array([r.length for r in space.allocated_list], dtype=object)
        self.max_size = space.max_size

    @property
    def free_regions(self) -> int:
        return int(self.free_lengths.size)

    @property
    def allocated_regions(self) -> int:
        return int(self.allocated_lengths.size)

    @property
    def total_free(self) -> int:
        return int(self.free_lengths.sum())

    @property
    def largest_free(self) -> int:
        if self.free_lengths.size == 0:
            return 0
        return int(self.free_lengths.max())

    @property
    def external_fragmentation(self) -> float:
        # 0.0: all free space is one region; close to 1.0: scattered in small pieces
        total = self.total_free
        if total == 0:
            return 0.0
        return 1.0 - self.largest_free / total

    def histogram(self):
        """Count free regions per power-of-two bucket: {bucket_lower_bound: count}"""
        if self.free_lengths.size == 0:
            return {}
        # floor(log2(n)) in integer math
        buckets = np.array([int(n).bit_length() - 1 for n in self.free_lengths], dtype=np.int64)
        ids, counts = np.unique(buckets, return_counts=True)
        return {1 << int(b): int(c) for b, c in zip(ids, counts)}

    def summary(self) -> str:
        return (f"free {self.total_free}/{self.max_size} in {self.free_regions} regions, "
                f"largest {self.largest_free}, allocated {self.allocated_regions} regions, "
                f"fragmentation {self.external_fragmentation:.2f}")
