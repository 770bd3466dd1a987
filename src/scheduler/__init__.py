"""Window Scheduler — два торговых окна в сутки."""

from .window_scheduler import (
    WindowScheduler,
    WindowSchedulerConfig,
    derive_seed,
    generate,
    is_open,
)

__all__ = [
    "WindowScheduler",
    "WindowSchedulerConfig",
    "derive_seed",
    "generate",
    "is_open",
]
