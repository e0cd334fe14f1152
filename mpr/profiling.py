"""Step timing for slice extraction: wall time in ms + current RSS.

Usage:
    from mpr.profiling import step

    with step("upload texture"):
        sampler = SliceSampler(volume)

    with step("extract slice"):
        with step("dispatch"):
            ...

Output format:
    [upload texture] 41.7 ms | RSS 312 MB
      [dispatch] 0.9 ms | RSS 314 MB
"""

import resource
import threading
import time
from contextlib import contextmanager

_local = threading.local()


def _rss_mb():
    """Current RSS in MB from /proc, or the peak RSS where /proc is absent."""
    try:
        with open("/proc/self/status") as f:
            for line in f:
                if line.startswith("VmRSS:"):
                    return int(line.split()[1]) / 1024
    except (OSError, ValueError):
        pass
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024


@contextmanager
def step(name):
    """Time a named block and print one indented summary line on exit."""
    depth = getattr(_local, "depth", 0)
    _local.depth = depth + 1
    t_start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - t_start) * 1000.0
        print(f"{'  ' * depth}[{name}] {elapsed_ms:.1f} ms"
              f" | RSS {_rss_mb():.0f} MB")
        _local.depth = depth
