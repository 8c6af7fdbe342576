from .engine import (
    AnimationEngine,
    AnimationSettings,
    AnimationState,
    floating_offsets,
    pointer_push,
)

__all__ = [
    "AnimationEngine", "AnimationSettings", "AnimationState",
    "floating_offsets", "pointer_push",
]
