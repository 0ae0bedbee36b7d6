"""
Engine - a loaded LiteRT-LM model.

The Engine owns two native handles: the engine settings it was built from
and the engine itself. Both live in an ``_EngineHandles`` block that is
shared with every Session minted from the engine, so the native engine is
only released once the Engine and all of its sessions are closed.

Example:
    >>> from litert_lm import Backend, Engine
    >>> with Engine("model.litertlm", Backend.CPU) as engine:
    ...     with engine.create_session() as session:
    ...         print(session.generate("What is the capital of France?"))
    Paris
"""

from __future__ import annotations

import os
import threading
from typing import Any

from . import _bindings as _c
from ._logging import scoped_logger
from .exceptions import NativeConstructionError, StateError
from .session import Session
from .types import Backend

logger = scoped_logger("engine")


class _EngineHandles:
    """Native engine + settings pair, released when the last holder lets go.

    Holders are the owning Engine and each live Session. The count is only
    touched under ``_lock``; native release happens outside the lock, once.
    """

    def __init__(self, lib: Any, settings: int, engine: int) -> None:
        self.lib = lib
        self._settings: int | None = settings
        self._engine: int | None = engine
        self._holders = 1
        self._owner_open = True
        self._lock = threading.Lock()

    @property
    def engine(self) -> int:
        if self._engine is None:
            raise StateError("Engine has been released.", code="STATE_CLOSED")
        return self._engine

    @property
    def sessions(self) -> int:
        with self._lock:
            return self._holders - (1 if self._owner_open else 0)

    def acquire(self) -> None:
        """Take a reference for a new session."""
        with self._lock:
            if not self._owner_open:
                raise StateError(
                    "Engine has been closed. Create a new Engine instance.",
                    code="STATE_CLOSED",
                )
            self._holders += 1

    def release_owner(self) -> bool:
        """Drop the Engine's own reference. Returns False if already dropped."""
        with self._lock:
            if not self._owner_open:
                return False
            self._owner_open = False
        self.release()
        return True

    def release(self) -> None:
        """Drop one reference, freeing the native handles on the last one."""
        with self._lock:
            self._holders -= 1
            if self._holders > 0:
                return
            engine, self._engine = self._engine, None
            settings, self._settings = self._settings, None

        # engine first: it was built from the settings
        if engine is not None:
            self.lib.litert_lm_engine_delete(engine)
        if settings is not None:
            self.lib.litert_lm_engine_settings_delete(settings)
        logger.debug("Native engine released")


class Engine:
    """
    A loaded model, ready to mint sessions.

    Args:
        model_path: Path to the model file.
        backend: Execution backend, ``Backend.CPU`` (default) or
            ``Backend.GPU``. The strings ``"cpu"`` and ``"gpu"`` are accepted.

    Raises
    ------
        InvalidArgumentError: If the path contains a NUL byte or the backend
            is not supported.
        NativeConstructionError: If the native settings or engine could not
            be created.
        LibraryNotFoundError: If the native library cannot be loaded.

    Concurrency:
        An Engine may be shared across threads. ``create_session()`` is safe
        to call concurrently; each returned Session must then be used by one
        caller at a time.

    Lifetime:
        Sessions keep the native engine alive. Closing the Engine stops new
        sessions from being created; the model is unloaded once the last
        session is closed as well.
    """

    def __init__(self, model_path: str | os.PathLike, backend: Backend | str = Backend.CPU):
        self._handles: _EngineHandles | None = None
        self._backend = Backend.parse(backend)

        path_bytes = _c.to_native_path(model_path, "model path")
        backend_bytes = _c.to_native_text(self._backend.native, "backend")
        self._model_path = os.fsdecode(path_bytes)

        lib = _c.get_lib()
        log_extra = {"model_path": self._model_path, "backend": self._backend.value}

        settings = lib.litert_lm_engine_settings_create(path_bytes, backend_bytes)
        if not settings:
            logger.warning("Engine settings creation returned null", extra=log_extra)
            raise NativeConstructionError(
                "Failed to create engine settings",
                details={"resource": "engine_settings", **log_extra},
            )

        engine = lib.litert_lm_engine_create(settings)
        if not engine:
            lib.litert_lm_engine_settings_delete(settings)
            logger.warning("Engine creation returned null", extra=log_extra)
            raise NativeConstructionError(
                "Failed to create engine",
                details={"resource": "engine", **log_extra},
            )

        self._handles = _EngineHandles(lib, settings, engine)
        logger.debug("Engine created", extra=log_extra)

    @classmethod
    def create(cls, model_path: str | os.PathLike, backend: Backend | str = Backend.CPU) -> Engine:
        """Load a model. Equivalent to ``Engine(model_path, backend)``."""
        return cls(model_path, backend)

    @property
    def model_path(self) -> str:
        """Path of the loaded model."""
        return self._model_path

    @property
    def backend(self) -> Backend:
        """Backend the model was loaded on."""
        return self._backend

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._handles is None

    @property
    def active_sessions(self) -> int:
        """Number of open sessions created from this engine."""
        if self._handles is None:
            return 0
        return self._handles.sessions

    def _check_closed(self) -> _EngineHandles:
        handles = self._handles
        if handles is None:
            raise StateError(
                "Engine has been closed. Create a new Engine instance.",
                code="STATE_CLOSED",
            )
        return handles

    def create_session(self) -> Session:
        """
        Create a new conversation session.

        Sessions are independent of each other; any number may be created.

        Returns
        -------
            A new Session.

        Raises
        ------
            StateError: If the engine has been closed.
            NativeConstructionError: If the native session could not be created.
        """
        handles = self._check_closed()
        handles.acquire()
        try:
            raw = handles.lib.litert_lm_engine_create_session(handles.engine)
        except BaseException:
            handles.release()
            raise
        if not raw:
            handles.release()
            logger.warning("Session creation returned null", extra={"model_path": self._model_path})
            raise NativeConstructionError(
                "Failed to create session",
                details={"resource": "session", "model_path": self._model_path},
            )
        logger.debug("Session created", extra={"model_path": self._model_path})
        return Session(self, handles, raw)

    def close(self) -> None:
        """
        Close the engine.

        No new sessions can be created afterwards. The native engine is
        released now if no sessions are open, otherwise when the last one
        closes. Safe to call multiple times.
        """
        handles, self._handles = self._handles, None
        if handles is not None and handles.release_owner():
            logger.debug("Engine closed", extra={"model_path": self._model_path})

    def __enter__(self) -> Engine:
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
        model_path = getattr(self, "_model_path", None)
        backend = getattr(self, "_backend", None)
        backend_name = backend.value if backend is not None else None
        return f"Engine({model_path!r}, backend={backend_name!r}, status={status})"
