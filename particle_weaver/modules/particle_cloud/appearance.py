"""Per-particle colors, sizes and drift velocities.

Color variation offsets each particle's hue, saturation and lightness by
an independent ``(u - 0.5) * variation``; hue wraps, saturation and
lightness clamp to [0, 1].  Sizes are floored at MIN_PARTICLE_SIZE.
"""

import colorsys
import numbers
from typing import Optional, Sequence, Union

import numpy as np

from particle_weaver.shared.constants import MIN_PARTICLE_SIZE, VELOCITY_SPREAD
from particle_weaver.shared.errors import InvalidRequest
from particle_weaver.shared.random_source import ensure_rng

ColorLike = Union[str, int, Sequence[float]]


def parse_color(value: ColorLike) -> tuple[float, float, float]:
    """``"#rrggbb"``, ``"#rgb"``, ``0xRRGGBB`` or an RGB triple in [0, 1]."""
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) != 6:
            raise InvalidRequest(f"Unsupported color: {value!r}")
        try:
            value = int(text, 16)
        except ValueError as exc:
            raise InvalidRequest(f"Unsupported color: {value!r}") from exc

    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        if not 0 <= value <= 0xFFFFFF:
            raise InvalidRequest(f"Color out of range: {value:#x}")
        return ((value >> 16) & 0xFF) / 255.0, ((value >> 8) & 0xFF) / 255.0, (value & 0xFF) / 255.0

    try:
        rgb = tuple(float(c) for c in value)
    except TypeError as exc:
        raise InvalidRequest(f"Unsupported color: {value!r}") from exc
    if len(rgb) != 3 or not all(0.0 <= c <= 1.0 for c in rgb):
        raise InvalidRequest(f"RGB color needs three components in [0, 1], got {value!r}")
    return rgb


def _hue_to_rgb(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.mod(t, 1.0)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, q, p + (q - p) * 6 * (2 / 3 - t)],
        default=p,
    )


def hsl_to_rgb(h: np.ndarray, s: np.ndarray, l: np.ndarray) -> np.ndarray:
    """Vectorised HSL → RGB, all inputs in [0, 1]; returns (N, 3)."""
    q = np.where(l <= 0.5, l * (1 + s), l + s - l * s)
    p = 2 * l - q
    rgb = np.stack([_hue_to_rgb(p, q, h + 1 / 3), _hue_to_rgb(p, q, h), _hue_to_rgb(p, q, h - 1 / 3)], axis=1)
    grey = s == 0
    rgb[grey] = l[grey, None]
    return rgb


def init_colors(count: int, color: ColorLike, variation: float = 0.0,
                rng: Optional[np.random.Generator] = None) -> np.ndarray:
    base = np.array(parse_color(color))
    if variation <= 0 or count == 0:
        return np.tile(base, count).astype(np.float32)

    h0, l0, s0 = colorsys.rgb_to_hls(*base)
    offsets = (ensure_rng(rng).uniform(0.0, 1.0, size=(count, 3)) - 0.5) * variation
    h = np.mod(h0 + offsets[:, 0], 1.0)
    s = np.clip(s0 + offsets[:, 1], 0.0, 1.0)
    l = np.clip(l0 + offsets[:, 2], 0.0, 1.0)
    return np.clip(hsl_to_rgb(h, s, l), 0.0, 1.0).astype(np.float32).reshape(-1)


def init_sizes(count: int, size: float, variation: float = 0.0,
               rng: Optional[np.random.Generator] = None) -> np.ndarray:
    sizes = np.full(count, float(size))
    if variation > 0:
        sizes += (ensure_rng(rng).uniform(0.0, 1.0, size=count) - 0.5) * variation
    return np.maximum(MIN_PARTICLE_SIZE, sizes).astype(np.float32)


def init_velocities(count: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    u = ensure_rng(rng).uniform(0.0, 1.0, size=count * 3)
    return ((u - 0.5) * VELOCITY_SPREAD).astype(np.float32)
