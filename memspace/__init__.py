"""memspace: a simulated first-fit memory allocator"""

from .block_list import MemoryRegion, BlockList
from .errors import MemSpaceError, OutOfRangeError, NotFoundError
from .mem_allocator import MemorySpace, ALLOC_FAILED
from .stats import FragmentationStats

__all__ = [
    'MemoryRegion', 'BlockList', 'MemorySpace', 'ALLOC_FAILED',
    'FragmentationStats', 'MemSpaceError', 'OutOfRangeError', 'NotFoundError',
]
