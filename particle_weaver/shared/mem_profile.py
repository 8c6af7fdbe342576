"""Memory accounting for particle generation.

Three tools:

1. ``estimate_cloud_mb(count)``: analytical size of a cloud's float32
   buffers, checked by the weaver before a cloud is published.

2. ``tracemalloc_snapshot(label)``: context manager around a generation
   request.  Logs how much the heap grew and the peak reached while
   sampling, and at DEBUG the allocation sites behind the growth.

3. ``@profile_memory``: line-by-line RAM table for the heavy samplers
   (vertex extraction, surface raycasting).  Active only when
   ``PROFILE_MEMORY=1`` is set; needs the ``profile`` extra.

Usage::

    with tracemalloc_snapshot("model extraction"):
        result = extract_vertices(parts, max_vertices=15000)

    PROFILE_MEMORY=1 python main.py sphere-volume --count 15000
"""
from __future__ import annotations

import contextlib
import logging
import os
import tracemalloc
from typing import Generator

log = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_PROFILE_ACTIVE = os.environ.get("PROFILE_MEMORY", "0").strip().lower() in _TRUTHY

_FLOAT32_BYTES = 4
# positions, working positions, colors (3 each) + sizes (1)
_FLOATS_PER_PARTICLE = 3 + 3 + 3 + 1


def estimate_cloud_mb(count: int, with_velocities: bool = False) -> float:
    floats = _FLOATS_PER_PARTICLE + (3 if with_velocities else 0)
    return count * floats * _FLOAT32_BYTES / (1024 * 1024)


@contextlib.contextmanager
def tracemalloc_snapshot(label: str, top_n: int = 5) -> Generator[None, None, None]:
    """Log heap growth and peak for the enclosed generation step.

    The peak is measured from the start of the innermost block.  Only the
    block that started tracing stops it.

    Example::

        with tracemalloc_snapshot("generate ShapeRequest"):
            weaver.generate(ShapeRequest("sphere-volume", count=15000))
        # INFO  [mem] generate ShapeRequest: grew +412.3 KB, peak 1.21 MB
    """
    owns_trace = not tracemalloc.is_tracing()
    if owns_trace:
        tracemalloc.start(10)
    start, _ = tracemalloc.get_traced_memory()
    tracemalloc.reset_peak()
    sites_before = tracemalloc.take_snapshot() if log.isEnabledFor(logging.DEBUG) else None

    try:
        yield
    finally:
        current, peak = tracemalloc.get_traced_memory()
        log.info("[mem] %s: grew %+.1f KB, peak %.2f MB",
                 label, (current - start) / 1024, max(0, peak - start) / (1024 * 1024))

        if sites_before is not None:
            growth = tracemalloc.take_snapshot().compare_to(sites_before, "lineno")
            for stat in [s for s in growth if s.size_diff > 0][:top_n]:
                where = stat.traceback[0] if stat.traceback else "?"
                log.debug("[mem]   %+9.1f KB  %s", stat.size_diff / 1024, where)

        if owns_trace:
            tracemalloc.stop()


def profile_memory(fn):
    """Wrap *fn* in ``memory_profiler.profile`` when ``PROFILE_MEMORY=1``.

    Returns *fn* itself otherwise, or when the profiler is not installed.
    """
    if not _PROFILE_ACTIVE:
        return fn
    try:
        from memory_profiler import profile  # type: ignore[import-untyped]
    except ImportError:
        log.warning("[mem] PROFILE_MEMORY set but memory-profiler is missing; "
                    "%s runs unprofiled (pip install particle-weaver[profile])", fn.__qualname__)
        return fn
    return profile(fn)
