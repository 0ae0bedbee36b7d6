"""
Native library loading and text marshaling.

Justification: locates and loads the LiteRT-LM shared library exactly once,
applies the ctypes signatures from _native.py, and owns the conversions
every boundary call needs: Python text and filesystem paths to
NUL-terminated native strings (rejecting embedded NULs), and borrowed
native text back to an owned Python str.
"""

import ctypes
import ctypes.util
import os
import sys
import threading
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from ._native import InputData, InputDataType, setup_signatures
from .exceptions import InvalidArgumentError, LibraryNotFoundError

logger = scoped_logger("loader")

LIB_PATH_ENV = "LITERT_LM_LIB_PATH"

_lib: Any = None
_lib_lock = threading.Lock()


# =============================================================================
# Library Loading
# =============================================================================


def _lib_filename() -> str:
    """Get the shared library filename for the current platform."""
    if sys.platform == "win32":
        return "engine.dll"
    if sys.platform == "darwin":
        return "libengine.dylib"
    return "libengine.so"


def _candidate_paths() -> list[str]:
    """Library locations in search order."""
    filename = _lib_filename()
    candidates: list[str] = []

    env_path = os.environ.get(LIB_PATH_ENV)
    if env_path:
        path = Path(env_path)
        candidates.append(str(path / filename if path.is_dir() else path))

    candidates.append(str(Path(__file__).parent / filename))

    found = ctypes.util.find_library("engine")
    if found:
        candidates.append(found)
    return candidates


def _load() -> Any:
    tried: list[str] = []
    errors: dict[str, str] = {}
    for candidate in _candidate_paths():
        tried.append(candidate)
        # bare names come from find_library and are resolved by the loader
        if os.sep in candidate and not Path(candidate).exists():
            continue
        try:
            lib = ctypes.CDLL(candidate)
        except OSError as exc:
            errors[candidate] = str(exc)
            continue
        setup_signatures(lib)
        logger.debug("Loaded native library", extra={"path": candidate})
        return lib

    raise LibraryNotFoundError(
        f"Could not load the LiteRT-LM library ({_lib_filename()}). "
        f"Set {LIB_PATH_ENV} to the library file or its directory.",
        details={"tried": tried, "errors": errors},
    )


def get_lib() -> Any:
    """Get the native library with all signatures configured.

    The library is loaded on first use and cached for the process.

    Raises
    ------
    LibraryNotFoundError
        If no candidate location holds a loadable library.
    """
    global _lib
    if _lib is None:
        with _lib_lock:
            if _lib is None:
                _lib = _load()
    return _lib


# =============================================================================
# Text Marshaling
# =============================================================================


def _reject_nul(data: bytes, name: str) -> bytes:
    offset = data.find(b"\x00")
    if offset != -1:
        raise InvalidArgumentError(
            f"Invalid {name}: nul byte found at position {offset}",
            details={"parameter": name, "position": offset},
        )
    return data


def to_native_text(value: str | bytes | os.PathLike, name: str) -> bytes:
    """Encode a text parameter as UTF-8 bytes suitable for a C string.

    Raises
    ------
    InvalidArgumentError
        If the text contains an embedded NUL byte or cannot be encoded.
    """
    raw = os.fspath(value) if isinstance(value, os.PathLike) else value
    if isinstance(raw, bytes):
        data = raw
    else:
        try:
            data = raw.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidArgumentError(
                f"Invalid {name}: not encodable as UTF-8 ({exc.reason})",
                details={"parameter": name},
            ) from exc
    return _reject_nul(data, name)


def to_native_path(value: str | bytes | os.PathLike, name: str) -> bytes:
    """Encode a filesystem path for a C string.

    Uses the filesystem encoding, so undecodable names that Python carries
    as surrogate escapes (``os.listdir``, ``os.fsdecode``) get their
    original bytes back.

    Raises
    ------
    InvalidArgumentError
        If the path contains an embedded NUL byte or cannot be encoded.
    """
    try:
        data = os.fsencode(value)
    except UnicodeEncodeError as exc:
        raise InvalidArgumentError(
            f"Invalid {name}: not encodable with the filesystem encoding ({exc.reason})",
            details={"parameter": name},
        ) from exc
    return _reject_nul(data, name)


def copy_native_text(ptr: int) -> str:
    """Copy a NUL-terminated native string into an owned str.

    The pointer is borrowed; the caller must still own the buffer it
    points into. Invalid UTF-8 sequences are replaced with U+FFFD.
    """
    return ctypes.string_at(ptr).decode("utf-8", errors="replace")


def build_text_input(text: bytes) -> tuple[ctypes.Array, ctypes.Array]:
    """Build a one-chunk InputData array for a text prompt.

    Returns (inputs, buffer). ``buffer`` backs ``inputs[0].data`` and must
    stay referenced until the native call returns.
    """
    buffer = ctypes.create_string_buffer(text)
    inputs = (InputData * 1)()
    inputs[0].type = InputDataType.TEXT
    inputs[0].data = ctypes.addressof(buffer)
    inputs[0].size = len(text)
    return inputs, buffer
