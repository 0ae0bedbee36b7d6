"""
Global pytest fixtures for litert_lm tests.

This module provides:
- Fault handling for native crashes
- FakeEngineLib, a recording stand-in for the native LiteRT-LM library
- Fixtures that install the fake in place of the loaded library

The fake hands out integer handles, tracks which are live, and records
every call in order. Releasing a handle twice, releasing settings before
their engine, touching a released buffer, or releasing an engine while a
session still uses it is recorded in ``errors``. The ``fake_lib`` fixture
fails the test if any such error was seen or any handle is left live.
"""

import ctypes
import faulthandler
import gc
import threading
from collections.abc import Callable
from typing import Any

import pytest

from litert_lm import _bindings

faulthandler.enable()


# =============================================================================
# Fake Native Library
# =============================================================================


class FakeEngineLib:
    """Recording stand-in for libengine with the same entry points."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.errors: list[str] = []
        self.fail: set[str] = set()
        self.live: dict[int, str] = {}
        self.prompts: list[bytes] = []
        self.input_types: list[int] = []
        self.response_text: bytes | None = b"Paris"
        self.benchmark = (0.042, 1, 7)
        self.on_generate: Callable[[], None] | None = None
        self._parents: dict[int, int] = {}
        self._texts: dict[int, ctypes.Array] = {}
        self._next_handle = 0x1000
        self._lock = threading.Lock()

    # -- bookkeeping ---------------------------------------------------------

    def _record(self, name: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((name, args))

    def _alloc(self, kind: str, parent: int | None = None) -> int:
        with self._lock:
            self._next_handle += 0x10
            handle = self._next_handle
            self.live[handle] = kind
            if parent is not None:
                self._parents[handle] = parent
            return handle

    def _check_live(self, handle: int, kind: str, op: str) -> bool:
        if self.live.get(handle) != kind:
            self.errors.append(f"{op}: {kind} handle {handle:#x} is not live")
            return False
        return True

    def _free(self, handle: int, kind: str, op: str) -> None:
        with self._lock:
            if self._check_live(handle, kind, op):
                del self.live[handle]

    def names(self) -> list[str]:
        """Names of all recorded calls, in order."""
        return [name for name, _ in self.calls]

    def count(self, name: str) -> int:
        return self.names().count(name)

    def live_kinds(self) -> list[str]:
        return sorted(self.live.values())

    # -- engine settings -----------------------------------------------------

    def litert_lm_engine_settings_create(self, model_path: bytes, backend: bytes) -> int | None:
        self._record("litert_lm_engine_settings_create", model_path, backend)
        if "litert_lm_engine_settings_create" in self.fail:
            return None
        return self._alloc("settings")

    def litert_lm_engine_settings_delete(self, settings: int) -> None:
        self._record("litert_lm_engine_settings_delete", settings)
        if any(parent == settings for h, parent in self._parents.items() if h in self.live):
            self.errors.append("settings released while its engine is live")
        self._free(settings, "settings", "settings_delete")

    # -- engine --------------------------------------------------------------

    def litert_lm_engine_create(self, settings: int) -> int | None:
        self._record("litert_lm_engine_create", settings)
        self._check_live(settings, "settings", "engine_create")
        if "litert_lm_engine_create" in self.fail:
            return None
        return self._alloc("engine", parent=settings)

    def litert_lm_engine_delete(self, engine: int) -> None:
        self._record("litert_lm_engine_delete", engine)
        if any(parent == engine for h, parent in self._parents.items() if h in self.live):
            self.errors.append("engine released while a session is live")
        self._free(engine, "engine", "engine_delete")

    def litert_lm_engine_create_session(self, engine: int) -> int | None:
        self._record("litert_lm_engine_create_session", engine)
        self._check_live(engine, "engine", "create_session")
        if "litert_lm_engine_create_session" in self.fail:
            return None
        return self._alloc("session", parent=engine)

    # -- session -------------------------------------------------------------

    def litert_lm_session_delete(self, session: int) -> None:
        self._record("litert_lm_session_delete", session)
        self._free(session, "session", "session_delete")

    def litert_lm_session_generate_content(self, session: int, inputs: Any, count: int) -> int | None:
        self._record("litert_lm_session_generate_content", session, count)
        self._check_live(session, "session", "generate_content")
        for i in range(count):
            self.input_types.append(inputs[i].type)
            self.prompts.append(ctypes.string_at(inputs[i].data, inputs[i].size))
        if self.on_generate is not None:
            self.on_generate()
        if "litert_lm_session_generate_content" in self.fail:
            return None
        handle = self._alloc("responses")
        if self.response_text is not None:
            self._texts[handle] = ctypes.create_string_buffer(self.response_text)
        return handle

    def litert_lm_session_get_benchmark_info(self, session: int) -> int | None:
        self._record("litert_lm_session_get_benchmark_info", session)
        self._check_live(session, "session", "get_benchmark_info")
        if "litert_lm_session_get_benchmark_info" in self.fail:
            return None
        return self._alloc("benchmark")

    # -- responses -----------------------------------------------------------

    def litert_lm_responses_get_response_text_at(self, responses: int, index: int) -> int | None:
        self._record("litert_lm_responses_get_response_text_at", responses, index)
        self._check_live(responses, "responses", "get_response_text_at")
        text = self._texts.get(responses)
        if text is None or index != 0:
            return None
        return ctypes.addressof(text)

    def litert_lm_responses_delete(self, responses: int) -> None:
        self._record("litert_lm_responses_delete", responses)
        self._free(responses, "responses", "responses_delete")
        text = self._texts.pop(responses, None)
        if text is not None:
            # scribble over released memory so late reads are visible
            ctypes.memset(text, ord("X"), len(text) - 1)

    # -- benchmark info ------------------------------------------------------

    def litert_lm_benchmark_info_get_time_to_first_token(self, info: int) -> float:
        self._record("litert_lm_benchmark_info_get_time_to_first_token", info)
        self._check_live(info, "benchmark", "get_time_to_first_token")
        return self.benchmark[0]

    def litert_lm_benchmark_info_get_num_prefill_turns(self, info: int) -> int:
        self._record("litert_lm_benchmark_info_get_num_prefill_turns", info)
        self._check_live(info, "benchmark", "get_num_prefill_turns")
        return self.benchmark[1]

    def litert_lm_benchmark_info_get_num_decode_turns(self, info: int) -> int:
        self._record("litert_lm_benchmark_info_get_num_decode_turns", info)
        self._check_live(info, "benchmark", "get_num_decode_turns")
        return self.benchmark[2]

    def litert_lm_benchmark_info_delete(self, info: int) -> None:
        self._record("litert_lm_benchmark_info_delete", info)
        self._free(info, "benchmark", "benchmark_info_delete")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_lib(monkeypatch):
    """Install a FakeEngineLib as the loaded native library.

    Fails the test on any recorded misuse, or on any handle still live
    once the test's objects have been collected.
    """
    lib = FakeEngineLib()
    monkeypatch.setattr(_bindings, "_lib", lib)
    yield lib
    gc.collect()
    assert lib.errors == []
    assert lib.live_kinds() == [], "native handles leaked"


@pytest.fixture
def engine(fake_lib):
    """An open Engine backed by the fake library."""
    from litert_lm import Engine

    eng = Engine("/models/gemma3-1b-it.litertlm")
    yield eng
    eng.close()


@pytest.fixture
def session(engine):
    """An open Session on the ``engine`` fixture."""
    sess = engine.create_session()
    yield sess
    sess.close()
