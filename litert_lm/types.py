"""Plain value types returned by the bindings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .exceptions import InvalidArgumentError

__all__ = ["Backend", "BenchmarkInfo"]


class Backend(str, Enum):
    """Execution target for a loaded model."""

    CPU = "cpu"
    GPU = "gpu"

    @property
    def native(self) -> bytes:
        """Native text form passed to the engine settings."""
        return self.value.encode("ascii")

    @classmethod
    def from_native(cls, value: bytes) -> Backend:
        """Parse the native text form back into a Backend."""
        try:
            return cls(value.decode("ascii"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise InvalidArgumentError(
                f"Unknown native backend {value!r}",
                details={"parameter": "backend", "value": value},
            ) from exc

    @classmethod
    def parse(cls, value: Backend | str) -> Backend:
        """Accept a Backend or a case-insensitive name ("cpu", "gpu")."""
        if isinstance(value, Backend):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        choices = ", ".join(repr(b.value) for b in cls)
        raise InvalidArgumentError(
            f"backend must be one of {choices}, got {value!r}",
            details={"parameter": "backend", "value": value},
        )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BenchmarkInfo:
    """Timing and turn counters for a session.

    Attributes
    ----------
    time_to_first_token : float
        Seconds from request to the first generated token.
    num_prefill_turns : int
        Number of prefill turns the session has run.
    num_decode_turns : int
        Number of decode turns the session has run.
    """

    time_to_first_token: float
    num_prefill_turns: int
    num_decode_turns: int
