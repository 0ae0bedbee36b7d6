"""
litert_lm - Python bindings for the LiteRT-LM inference engine.

Loads a model through the native LiteRT-LM library and generates text,
with every native handle owned by exactly one Python object and released
exactly once.

Quick Start
-----------

    >>> from litert_lm import Backend, Engine
    >>>
    >>> with Engine("gemma3-1b-it.litertlm", Backend.CPU) as engine:
    ...     with engine.create_session() as session:
    ...         print(session.generate("What is the capital of France?"))
    Paris

One-liner:

    >>> import litert_lm
    >>> litert_lm.ask("gemma3-1b-it.litertlm", "What is 2+2?")
    '4'


Core Classes
------------

- `Engine` - A loaded model. Share it across threads; mint sessions from it.
- `Session` - One conversation. Use from one thread at a time.
- `BenchmarkInfo` - Timing snapshot from ``Session.get_benchmark_info()``.
- `Backend` - Execution target, ``CPU`` or ``GPU``.


Lifetime
--------

Engines and sessions release their native resources on ``close()``, on
leaving a ``with`` block, or (as a fallback) when garbage collected. A
session keeps its engine's model loaded until the session is closed, even
if the Engine object itself was closed first.


Native Library
--------------

The shared library (``libengine.so`` / ``libengine.dylib`` / ``engine.dll``)
is located via ``LITERT_LM_LIB_PATH``, then next to this package, then the
system loader path.
"""

import os

from litert_lm._logging import setup_logging
from litert_lm._version import __version__ as __version__
from litert_lm.engine import Engine
from litert_lm.exceptions import (
    EmptyResponseError,
    GenerationError,
    InvalidArgumentError,
    LibraryNotFoundError,
    LiteRtLmError,
    MetricsUnavailableError,
    NativeConstructionError,
    StateError,
)
from litert_lm.session import Session
from litert_lm.types import Backend, BenchmarkInfo


def ask(
    model_path: str | os.PathLike,
    prompt: str,
    *,
    backend: Backend | str = Backend.CPU,
) -> str:
    """Load a model, answer one prompt, and release everything.

    Loading is expensive; for more than one prompt create an Engine once
    and reuse it.

    Args:
        model_path: Path to the model file.
        prompt: The input text.
        backend: Execution backend.

    Returns
    -------
        The generated text.
    """
    with Engine(model_path, backend) as engine:
        with engine.create_session() as session:
            return session.generate(prompt)


__all__ = [
    # Core
    "Engine",
    "Session",
    "Backend",
    "BenchmarkInfo",
    "ask",
    # Logging
    "setup_logging",
    # Exceptions
    "LiteRtLmError",
    "InvalidArgumentError",
    "NativeConstructionError",
    "GenerationError",
    "EmptyResponseError",
    "MetricsUnavailableError",
    "StateError",
    "LibraryNotFoundError",
]
