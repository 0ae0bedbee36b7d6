"""
Backend and BenchmarkInfo value type tests.
"""

import pytest

from litert_lm import Backend, BenchmarkInfo, InvalidArgumentError


class TestBackend:
    """Tests for Backend."""

    @pytest.mark.parametrize("backend", list(Backend))
    def test_native_round_trip(self, backend):
        """from_native(native) gives back the same backend."""
        assert Backend.from_native(backend.native) is backend

    def test_native_text(self):
        """Native text is the lowercase ASCII name."""
        assert Backend.CPU.native == b"cpu"
        assert Backend.GPU.native == b"gpu"

    @pytest.mark.parametrize("value", ["cpu", "CPU", " Cpu "])
    def test_parse_names(self, value):
        """parse() accepts names case-insensitively, ignoring surrounding space."""
        assert Backend.parse(value) is Backend.CPU

    def test_parse_passes_backend_through(self):
        """parse() returns Backend members unchanged."""
        assert Backend.parse(Backend.GPU) is Backend.GPU

    @pytest.mark.parametrize("value", ["npu", "", None, 1])
    def test_parse_rejects_unknown(self, value):
        """Unknown backends raise InvalidArgumentError naming the choices."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            Backend.parse(value)
        assert "'cpu'" in str(exc_info.value)
        assert exc_info.value.details["parameter"] == "backend"

    @pytest.mark.parametrize("value", [b"tpu", b"\xff", b""])
    def test_from_native_rejects_unknown(self, value):
        """Unknown native text raises InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            Backend.from_native(value)

    def test_str(self):
        """str() is the name."""
        assert str(Backend.GPU) == "gpu"

    def test_is_str(self):
        """Backend compares equal to its name."""
        assert Backend.CPU == "cpu"


class TestBenchmarkInfo:
    """Tests for BenchmarkInfo."""

    def test_value_equality(self):
        """Snapshots with the same counters are equal."""
        assert BenchmarkInfo(0.5, 2, 10) == BenchmarkInfo(0.5, 2, 10)

    def test_fields(self):
        """Fields are named after the native counters."""
        info = BenchmarkInfo(time_to_first_token=0.5, num_prefill_turns=2, num_decode_turns=10)
        assert info.time_to_first_token == 0.5
        assert info.num_prefill_turns == 2
        assert info.num_decode_turns == 10
