"""Scoped owners for transient native buffers.

Result and benchmark buffers are only valid until their delete call. Each
owner here is used as a context manager by the call that produced it, so
every value is copied out before release and release runs exactly once on
every exit path.
"""

from __future__ import annotations

from typing import Any

from ._bindings import copy_native_text
from .exceptions import StateError
from .types import BenchmarkInfo


class NativeBuffer:
    """Owner of one native buffer handle and its delete function."""

    _kind = "buffer"
    _delete_fn = ""

    def __init__(self, lib: Any, handle: int) -> None:
        self._lib = lib
        self._handle: int | None = handle

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _live_handle(self) -> int:
        if self._handle is None:
            raise StateError(f"{self._kind} has been released.", code="STATE_CLOSED")
        return self._handle

    def close(self) -> None:
        """Release the native buffer (idempotent)."""
        handle, self._handle = self._handle, None
        if handle is not None:
            getattr(self._lib, self._delete_fn)(handle)

    def __enter__(self):
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass


class Responses(NativeBuffer):
    """Responses returned by one generate_content call."""

    _kind = "Responses"
    _delete_fn = "litert_lm_responses_delete"

    def text_at(self, index: int) -> str | None:
        """Copy the text of response ``index``, or None if the slot is empty."""
        ptr = self._lib.litert_lm_responses_get_response_text_at(self._live_handle(), index)
        if not ptr:
            return None
        return copy_native_text(ptr)


class BenchmarkInfoBuffer(NativeBuffer):
    """Benchmark info returned by one get_benchmark_info call."""

    _kind = "BenchmarkInfo"
    _delete_fn = "litert_lm_benchmark_info_delete"

    def snapshot(self) -> BenchmarkInfo:
        """Read all counters into a plain value."""
        handle = self._live_handle()
        lib = self._lib
        return BenchmarkInfo(
            time_to_first_token=float(lib.litert_lm_benchmark_info_get_time_to_first_token(handle)),
            num_prefill_turns=int(lib.litert_lm_benchmark_info_get_num_prefill_turns(handle)),
            num_decode_turns=int(lib.litert_lm_benchmark_info_get_num_decode_turns(handle)),
        )
