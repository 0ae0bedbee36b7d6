"""
C API declarations for the LiteRT-LM engine library.

Mirrors ``c/engine.h``. Keep the structs and the signature table below in
sync with that header: a missing or wrong argtypes entry makes ctypes pass
pointers as 32-bit ints on 64-bit platforms, which corrupts handles.

Every handle is declared as ``c_void_p`` so ctypes hands back plain ints
(or None for NULL). Text results are also declared ``c_void_p`` rather than
``c_char_p`` so callers copy them explicitly while the owning buffer is
still alive.
"""

import ctypes
from enum import IntEnum
from typing import Any

# Handle types for documentation
EngineSettingsHandle = ctypes.c_void_p
EngineHandle = ctypes.c_void_p
SessionHandle = ctypes.c_void_p
ResponsesHandle = ctypes.c_void_p
BenchmarkInfoHandle = ctypes.c_void_p


class InputDataType(IntEnum):
    """Kind of an input chunk passed to generate_content."""

    TEXT = 0
    IMAGE = 1
    AUDIO = 2
    AUDIO_END = 3


class InputData(ctypes.Structure):
    """One typed input chunk.

    ``data`` is borrowed: the library reads it during the call and must not
    keep the pointer after the call returns.
    """

    _fields_ = [
        ("type", ctypes.c_int),
        ("data", ctypes.c_void_p),
        ("size", ctypes.c_size_t),
    ]


# name -> (argtypes, restype)
SIGNATURES: dict[str, tuple[list[Any], Any]] = {
    # Engine settings
    "litert_lm_engine_settings_create": (
        [ctypes.c_char_p, ctypes.c_char_p],
        EngineSettingsHandle,
    ),
    "litert_lm_engine_settings_delete": ([EngineSettingsHandle], None),
    # Engine
    "litert_lm_engine_create": ([EngineSettingsHandle], EngineHandle),
    "litert_lm_engine_delete": ([EngineHandle], None),
    "litert_lm_engine_create_session": ([EngineHandle], SessionHandle),
    # Session
    "litert_lm_session_delete": ([SessionHandle], None),
    "litert_lm_session_generate_content": (
        [SessionHandle, ctypes.POINTER(InputData), ctypes.c_size_t],
        ResponsesHandle,
    ),
    "litert_lm_session_get_benchmark_info": ([SessionHandle], BenchmarkInfoHandle),
    # Responses
    "litert_lm_responses_get_response_text_at": (
        [ResponsesHandle, ctypes.c_int],
        ctypes.c_void_p,
    ),
    "litert_lm_responses_delete": ([ResponsesHandle], None),
    # Benchmark info
    "litert_lm_benchmark_info_get_time_to_first_token": (
        [BenchmarkInfoHandle],
        ctypes.c_double,
    ),
    "litert_lm_benchmark_info_get_num_prefill_turns": ([BenchmarkInfoHandle], ctypes.c_int),
    "litert_lm_benchmark_info_get_num_decode_turns": ([BenchmarkInfoHandle], ctypes.c_int),
    "litert_lm_benchmark_info_delete": ([BenchmarkInfoHandle], None),
}


def setup_signatures(lib: Any) -> None:
    """Apply argtypes/restype for every C API function to a loaded library.

    Raises AttributeError if the library does not export one of them.
    """
    for name, (argtypes, restype) in SIGNATURES.items():
        fn = getattr(lib, name)
        fn.argtypes = argtypes
        fn.restype = restype
