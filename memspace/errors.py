class MemSpaceError(Exception):
    pass

class OutOfRangeError(MemSpaceError, IndexError):
    def __init__(self, index, bound):
        super().__init__(f"index {index} out of range [0, {bound})")
        self.index = index
        self.bound = bound

class NotFoundError(MemSpaceError, LookupError):
    pass
