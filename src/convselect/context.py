"""
convselect Execution Context

Per-device handle used by applicability checks and invocation: the
target name, the stream, the execution backend and the profiling
kernel-time accumulator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from convselect.catalog import ExecutionBackend


@dataclass
class ExecutionContext:
    """Device handle for one stream.

    Not thread-safe: one context per stream.

    Attributes:
        device_name: Device name as reported by the runtime (e.g. "gfx90a:sramecc+:xnack-").
        backend: Execution backend requests are submitted to.
        stream: Opaque stream handle passed through to the backend.
        profiling: Whether kernel time is recorded on invoke.
    """

    device_name: str
    backend: "ExecutionBackend | None" = None
    stream: Any = None
    profiling: bool = False
    _kernel_time: float = field(default=0.0, init=False, repr=False)

    @property
    def target(self) -> str:
        """Architecture name without feature suffixes (e.g. "gfx90a")."""
        return self.device_name.split(":", 1)[0]

    @property
    def kernel_time(self) -> float:
        """Accumulated kernel time in milliseconds."""
        return self._kernel_time

    def reset_kernel_time(self) -> None:
        self._kernel_time = 0.0

    def accum_kernel_time(self, elapsed_ms: float) -> None:
        self._kernel_time += elapsed_ms
