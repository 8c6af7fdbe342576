"""Injectable random source.

Every sampler takes an optional ``numpy.random.Generator``; ``None``
means a fresh unseeded generator.  Seed one in tests for exact outputs.
"""

from typing import Optional

import numpy as np


def ensure_rng(rng: Optional[np.random.Generator] = None, seed: Optional[int] = None) -> np.random.Generator:
    if rng is not None:
        return rng
    return np.random.default_rng(seed=seed)
