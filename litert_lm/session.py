"""
Session - one conversation context bound to an Engine.

Sessions are created with ``Engine.create_session()``. Each one owns a
native session handle and holds a reference on its engine's native
handles, so the model stays loaded for as long as the session is open.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from . import _bindings as _c
from ._buffers import BenchmarkInfoBuffer, Responses
from ._logging import scoped_logger
from .exceptions import (
    EmptyResponseError,
    GenerationError,
    MetricsUnavailableError,
    StateError,
)
from .types import BenchmarkInfo

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .engine import Engine, _EngineHandles

logger = scoped_logger("session")


class Session:
    """
    A conversation context for text generation.

    Do not construct directly; use ``Engine.create_session()``.

    Concurrency:
        A Session may be passed between threads but serves one call at a
        time. A call made while another thread is inside ``generate()`` or
        ``get_benchmark_info()`` on the same session raises StateError
        (code ``STATE_BUSY``).

    Example:
        >>> with engine.create_session() as session:
        ...     print(session.generate("What is 2+2?"))
        4
    """

    def __init__(self, engine: Engine, handles: _EngineHandles, raw: int) -> None:
        self._engine = engine
        self._handles: _EngineHandles | None = handles
        self._lib = handles.lib
        self._raw: int | None = raw
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        """The Engine this session was created from."""
        return self._engine

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._raw is None

    @contextmanager
    def _use(self) -> Iterator[int]:
        """Hold the session for one native call."""
        if not self._lock.acquire(blocking=False):
            raise StateError(
                "Session is in use by another thread.",
                code="STATE_BUSY",
            )
        try:
            if self._raw is None:
                raise StateError(
                    "Session has been closed. Create a new session from the engine.",
                    code="STATE_CLOSED",
                )
            yield self._raw
        finally:
            self._lock.release()

    def generate(self, prompt: str) -> str:
        """
        Generate a response to a text prompt.

        Args:
            prompt: The input text.

        Returns
        -------
            The generated text. Invalid UTF-8 from the model is replaced
            with U+FFFD.

        Raises
        ------
            InvalidArgumentError: If the prompt contains a NUL byte.
            GenerationError: If the native call produced no result.
            EmptyResponseError: If the result held no text.
            StateError: If the session is closed or busy.
        """
        text = _c.to_native_text(prompt, "prompt")
        # buffer backs inputs[0].data; borrowed by the library for the call only
        inputs, buffer = _c.build_text_input(text)

        with self._use() as raw:
            handle = self._lib.litert_lm_session_generate_content(raw, inputs, 1)
            if not handle:
                logger.warning("generate_content returned null", extra={"prompt_bytes": len(text)})
                raise GenerationError(
                    "Failed to generate content",
                    details={"prompt_bytes": len(text)},
                )

            with Responses(self._lib, handle) as responses:
                result = responses.text_at(0)

        if result is None:
            raise EmptyResponseError()
        return result

    def get_benchmark_info(self) -> BenchmarkInfo:
        """
        Get timing and turn counters for this session.

        Returns
        -------
            A BenchmarkInfo snapshot.

        Raises
        ------
            MetricsUnavailableError: If the engine has no benchmark data
                (benchmarking not enabled).
            StateError: If the session is closed or busy.
        """
        with self._use() as raw:
            handle = self._lib.litert_lm_session_get_benchmark_info(raw)
            if not handle:
                raise MetricsUnavailableError(
                    "Failed to get benchmark info",
                    details={"hint": "benchmarking may not be enabled"},
                )
            with BenchmarkInfoBuffer(self._lib, handle) as info:
                return info.snapshot()

    def close(self) -> None:
        """
        Release the native session.

        Waits for a call running on another thread to finish first. Safe to
        call multiple times.
        """
        with self._lock:
            raw, self._raw = self._raw, None
            handles, self._handles = self._handles, None
        if raw is not None:
            self._lib.litert_lm_session_delete(raw)
            logger.debug("Session closed")
        if handles is not None:
            handles.release()

    def __enter__(self) -> Session:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass

    def __repr__(self) -> str:
        status = "closed" if self.closed else "open"
        return f"Session(model={self._engine.model_path!r}, status={status})"
