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

Usage:
    try:
        text = session.generate("Hello")
    except litert_lm.EmptyResponseError:
        print("The model produced no text")
    except litert_lm.GenerationError as e:
        print(f"Generation failed: {e}")
    except litert_lm.LiteRtLmError as e:
        # Catch any litert_lm error with structured details
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")
"""

from typing import Any

__all__ = [
    "LiteRtLmError",
    "InvalidArgumentError",
    "NativeConstructionError",
    "GenerationError",
    "EmptyResponseError",
    "MetricsUnavailableError",
    "StateError",
    "LibraryNotFoundError",
]


class LiteRtLmError(Exception):
    """
    Base exception for all litert_lm errors.

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "GENERATION_FAILED").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"resource": "engine"}).

    Example
    -------
    >>> try:
    ...     litert_lm.Engine("missing.litertlm")
    ... except litert_lm.LiteRtLmError as e:
    ...     print(f"Error code: {e.code}")
    Error code: NATIVE_CONSTRUCTION_FAILED
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Argument Errors
# =============================================================================


class InvalidArgumentError(LiteRtLmError, ValueError):
    """
    A text parameter cannot be represented as native text.

    Native strings are NUL-terminated, so any text containing an embedded
    ``\\x00`` byte is rejected before the native library is called.

    Also raised for a backend outside the supported set (``cpu``, ``gpu``).

    This exception inherits from both LiteRtLmError and ValueError::

        except litert_lm.LiteRtLmError:  # catches all litert_lm errors
        except ValueError:               # catches argument errors (Pythonic)
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_ARGUMENT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Construction Errors
# =============================================================================


class NativeConstructionError(LiteRtLmError, RuntimeError):
    """
    A native constructor returned a null handle.

    ``details["resource"]`` names what failed to construct:
    ``"engine_settings"``, ``"engine"`` or ``"session"``.

    Common causes:
    - Model file missing or in an unsupported format
    - Requested backend not available on this machine
    - Out of memory while loading weights
    """

    def __init__(
        self,
        message: str,
        code: str = "NATIVE_CONSTRUCTION_FAILED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)

    @property
    def resource(self) -> str | None:
        """Name of the native resource that failed to construct."""
        return self.details.get("resource")


# =============================================================================
# Generation Errors
# =============================================================================


class GenerationError(LiteRtLmError, RuntimeError):
    """
    Error during text generation.

    Raised when the native generate call returns no result buffer.
    """

    def __init__(
        self,
        message: str,
        code: str = "GENERATION_FAILED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class EmptyResponseError(GenerationError):
    """
    Generation succeeded but the first response slot held no text.

    The native result buffer has already been released when this is raised.
    """

    def __init__(
        self,
        message: str | None = None,
        code: str = "EMPTY_RESPONSE",
        details: dict[str, Any] | None = None,
    ):
        if message is None:
            message = "No response generated"
        super().__init__(message, code, details)


# =============================================================================
# Metrics Errors
# =============================================================================


class MetricsUnavailableError(LiteRtLmError, RuntimeError):
    """
    Benchmark info could not be fetched for a session.

    Usually means benchmarking was not enabled when the engine was built.
    """

    def __init__(
        self,
        message: str,
        code: str = "METRICS_UNAVAILABLE",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# State Errors
# =============================================================================


class StateError(LiteRtLmError, RuntimeError):
    """
    Invalid object state error.

    Raised when an operation is attempted on an object in an invalid state:
    - Using a closed engine, session or result buffer (``STATE_CLOSED``)
    - Calling into a session that another thread is using (``STATE_BUSY``)
    """

    def __init__(
        self,
        message: str,
        code: str = "STATE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Library Errors
# =============================================================================


class LibraryNotFoundError(LiteRtLmError, OSError):
    """
    The native LiteRT-LM library could not be loaded.

    Set ``LITERT_LM_LIB_PATH`` to the shared library file, or to the
    directory that contains it. ``details["tried"]`` lists every location
    that was attempted.
    """

    def __init__(
        self,
        message: str,
        code: str = "LIBRARY_NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
