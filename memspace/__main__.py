from .mem_allocator import MemorySpace
from .stats import FragmentationStats
import argparse
import os
import sys

def parse_trace(lines):
    for lineno, line in enumerate(lines, 1):
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        cmd, *args = line.split()
        try:
            args = [int(a) for a in args]
        except ValueError:
            raise Exception(f"line {lineno}: bad argument in {line!r}") from None
        yield lineno, cmd, args

def replay(space, lines, verbose=False, out=None):
    if out is None:
        out = sys.stdout
    for lineno, cmd, args in parse_trace(lines):
        if cmd == "alloc" and len(args) == 1:
            print(space.allocate(args[0]), file=out)
        elif cmd == "free" and len(args) == 1:
            space.release(args[0])
        elif cmd == "defrag" and not args:
            space.compact()
        elif cmd == "show" and not args:
            print(space, file=out)
        elif cmd == "stats" and not args:
            print(FragmentationStats(space).summary(), file=out)
        else:
            raise Exception(f"line {lineno}: cannot parse command {cmd} {args}")
        if verbose:
            print(f"=============== after line {lineno}: {cmd} {' '.join(map(str, args))}", file=out)
            print(space, file=out)
    return space

def main(argv=None):
    parser = argparse.ArgumentParser(
            prog="memspace",
            description="Replay an allocation trace against a first-fit memory space",
            )
    parser.add_argument('trace_file', help='trace file, one command per line (alloc N / free ADDR / defrag / show / stats)')
    parser.add_argument('-s','--size', type=int, default=1024, help='size of the simulated address range')
    parser.add_argument('-v','--verbose', action="store_true", help='print both region lists after each command')
    args = parser.parse_args(argv)

    trace_path = args.trace_file
    if not os.path.isabs(trace_path):
        trace_path = os.path.join(os.getcwd(), trace_path)

    space = MemorySpace(args.size)
    with open(trace_path) as file:
        replay(space, file, verbose=args.verbose)
    return space

if __name__ == "__main__":
    main()
