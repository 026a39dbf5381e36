import random

import pytest

from memspace import ALLOC_FAILED, MemoryRegion, MemorySpace, NotFoundError

def R(base, length):
    return MemoryRegion(base, length)

def state(mem):
    return mem.free_list.to_list(), mem.allocated_list.to_list()

def test_basic():
    mem = MemorySpace(1024)
    assert state(mem) == ([R(0, 1024)], [])

    addr = mem.allocate(mem.max_size)
    assert addr == 0
    assert mem.free_list.size() == 0
    assert mem.allocate(1) == ALLOC_FAILED
    mem.release(addr)

    addr0 = mem.allocate(mem.max_size - 1)
    addr1 = mem.allocate(1)
    assert addr0 == 0
    assert addr1 == mem.max_size - 1
    assert mem.used_size == mem.max_size
    assert mem.upper_bound() == mem.max_size
    mem.release(addr1)
    mem.release(addr0)
    mem.compact()
    assert state(mem) == ([R(0, 1024)], [])

def test_first_fit():
    mem = MemorySpace(15)
    assert mem.allocate(10) == 0
    assert mem.allocate(5) == 10
    mem.release(0)
    mem.release(10)
    mem.compact()
    assert state(mem)[0] == [R(0, 15)]
    assert mem.allocate(5) == 0
    assert mem.allocate(5) == 5
    assert mem.allocate(5) == 10
    mem.release(0)
    mem.release(10)
    assert state(mem)[0] == [R(0, 5), R(10, 5)]

    assert mem.allocate(3) == 0
    assert state(mem)[0] == [R(3, 2), R(10, 5)]
    # (3,2) is too small, the next fit is skipped over to (10,5)
    assert mem.allocate(4) == 10
    assert state(mem)[0] == [R(3, 2), R(14, 1)]
    assert state(mem)[1] == [R(5, 5), R(0, 3), R(10, 4)]

def test_exact_fit():
    mem = MemorySpace(10)
    assert mem.allocate(10) == 0
    assert state(mem) == ([], [R(0, 10)])

def test_allocation_failure():
    mem = MemorySpace(10)
    assert mem.allocate(5) == 0
    before = state(mem)
    assert mem.allocate(6) == ALLOC_FAILED
    assert state(mem) == before == ([R(5, 5)], [R(0, 5)])

def test_invalid_length():
    mem = MemorySpace(10)
    with pytest.raises(ValueError):
        mem.allocate(0)
    with pytest.raises(ValueError):
        mem.allocate(-3)
    assert state(mem) == ([R(0, 10)], [])
    with pytest.raises(ValueError):
        MemorySpace(0)

def test_release_then_compact():
    mem = MemorySpace(20)
    assert mem.allocate(10) == 0
    assert mem.allocate(10) == 10
    assert mem.free_list.size() == 0
    mem.release(0)
    mem.release(10)
    assert state(mem)[0] == [R(0, 10), R(10, 10)]
    assert mem.compact() == 1
    assert state(mem) == ([R(0, 20)], [])

def test_compact_merges_backwards():
    # the region that precedes sits later in the list than the one it joins
    mem = MemorySpace(30)
    for _ in range(3):
        mem.allocate(10)
    mem.release(20)
    mem.release(10)
    mem.release(0)
    assert state(mem)[0] == [R(20, 10), R(10, 10), R(0, 10)]
    assert mem.compact() == 2
    assert state(mem)[0] == [R(0, 30)]

def test_compact_keeps_gaps():
    mem = MemorySpace(40)
    addrs = [mem.allocate(10) for _ in range(4)]
    assert addrs == [0, 10, 20, 30]
    mem.release(0)
    mem.release(20)
    assert mem.compact() == 0
    assert state(mem)[0] == [R(0, 10), R(20, 10)]
    mem.release(30)
    assert mem.compact() == 1
    assert state(mem)[0] == [R(0, 10), R(20, 20)]

def test_compact_idempotent():
    mem = MemorySpace(64)
    addrs = [mem.allocate(8) for _ in range(8)]
    for addr in addrs[::2] + addrs[1::2][:2]:
        mem.release(addr)
    mem.compact()
    first = state(mem)[0]
    assert mem.compact() == 0
    assert state(mem)[0] == first

def test_release_unknown():
    mem = MemorySpace(10)
    with pytest.raises(NotFoundError):
        mem.release(5)
    assert state(mem) == ([R(0, 10)], [])

    addr = mem.allocate(4)
    mem.release(addr)
    with pytest.raises(NotFoundError):
        mem.release(addr)
    # released but not yet compacted
    assert state(mem) == ([R(4, 6), R(0, 4)], [])

def test_release_inside_region():
    mem = MemorySpace(10)
    addr = mem.allocate(6)
    with pytest.raises(NotFoundError):
        mem.release(addr + 1)
    assert state(mem)[1] == [R(0, 6)]

def test_allocate_or_compact():
    mem = MemorySpace(20)
    a = mem.allocate(10)
    b = mem.allocate(10)
    mem.release(a)
    mem.release(b)
    assert mem.allocate(15) == ALLOC_FAILED
    assert mem.allocate_or_compact(15) == 0
    assert mem.allocate_or_compact(15) == ALLOC_FAILED

def test_aliases():
    mem = MemorySpace(8)
    addr = mem.malloc(8)
    mem.free(addr)
    mem.defrag()
    assert state(mem) == ([R(0, 8)], [])

def test_str():
    mem = MemorySpace(10)
    mem.allocate(4)
    assert str(mem) == "(4 , 6) \n(0 , 4) "
    assert mem.regions() == {"free": [R(4, 6)], "allocated": [R(0, 4)]}

def test_check_invariants():
    mem = MemorySpace(10)
    mem.allocate(4)
    mem.check_invariants()
    # corrupt the state behind the allocator's back
    mem.free_list.append_last(R(2, 2))
    with pytest.raises(AssertionError):
        mem.check_invariants()

def test_auto_check(monkeypatch):
    monkeypatch.setenv("MEMSPACE_CHECK", "1")
    mem = MemorySpace(10)
    mem.allocate(4)
    mem.free_list.append_last(R(2, 2))
    with pytest.raises(AssertionError):
        mem.allocate(1)

def test_log(monkeypatch, capsys):
    monkeypatch.setenv("MEMSPACE_LOG", "1")
    mem = MemorySpace(10)
    mem.allocate(4)
    mem.allocate(100)
    out = capsys.readouterr().out
    assert "allocate(4) -> 0" in out
    assert "allocate(100) failed" in out

    monkeypatch.setenv("MEMSPACE_LOG", "0")
    mem.allocate(1)
    assert capsys.readouterr().out == ""

def test_random(monkeypatch):
    monkeypatch.setenv("MEMSPACE_CHECK", "1")
    rng = random.Random(0)
    mem = MemorySpace(256)
    live = []
    for _ in range(2000):
        op = rng.random()
        if op < 0.5:
            length = rng.randint(1, 40)
            addr = mem.allocate(length)
            if addr != ALLOC_FAILED:
                live.append(addr)
        elif op < 0.9 and live:
            mem.release(live.pop(rng.randrange(len(live))))
        else:
            mem.compact()
            assert mem.compact() == 0
        free_total = mem.free_list.total_length()
        used_total = mem.allocated_list.total_length()
        assert free_total + used_total == mem.max_size
        assert sorted(live) == sorted(r.base_address for r in mem.allocated_list)

if __name__ == "__main__":
    test_basic()
