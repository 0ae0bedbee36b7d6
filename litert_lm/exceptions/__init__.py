"""
LiteRT-LM exceptions.

This module defines the exception hierarchy for litert_lm:

    LiteRtLmError (base)
    ├── InvalidArgumentError - Text cannot be passed to the native library
    ├── NativeConstructionError - Native settings/engine/session creation failed
    ├── GenerationError - Errors during text generation
    │   └── EmptyResponseError - Generation produced no readable text
    ├── MetricsUnavailableError - Benchmark info could not be fetched
    ├── StateError - Invalid object state (closed or busy)
    └── LibraryNotFoundError - Native library could not be located
"""

from .exceptions import (
    EmptyResponseError,
    GenerationError,
    InvalidArgumentError,
    LibraryNotFoundError,
    LiteRtLmError,
    MetricsUnavailableError,
    NativeConstructionError,
    StateError,
)

__all__ = [
    # Base
    "LiteRtLmError",
    # Arguments
    "InvalidArgumentError",
    # Construction
    "NativeConstructionError",
    # Generation
    "GenerationError",
    "EmptyResponseError",
    # Metrics
    "MetricsUnavailableError",
    # State
    "StateError",
    # Library
    "LibraryNotFoundError",
]
