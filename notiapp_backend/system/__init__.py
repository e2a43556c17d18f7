"""System layer utility module."""

from .runtime import (
    AppRuntime,
    build_runtime,
    get_runtime,
    get_runtime_stats,
    start_runtime,
    stop_runtime,
)

__all__ = [
    "AppRuntime",
    "build_runtime",
    "get_runtime",
    "start_runtime",
    "stop_runtime",
    "get_runtime_stats",
]
