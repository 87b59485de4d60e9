"""
Collaborator interfaces for candidate kernels and their execution.

Defines the boundary between the selection core and the vendor kernel
catalog, the execution backend and the external search driver, so that
the core can be driven by any implementation (including test fakes).

This module provides:
- CandidateHandle / CandidateCatalog: enumerable candidate source
- ExecutionBackend: submits requests and reports elapsed time
- SearchDriver: external empirical tuner
- ExecutionRequest, IOBuffers, ElementwiseOp(s): request payloads
- KernelInstance: plain CandidateHandle backed by a support callable
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Final,
    Protocol,
    Sequence,
    runtime_checkable,
)

if TYPE_CHECKING:
    import torch

    from convselect.context import ExecutionContext
    from convselect.models.problem import ProblemDescriptor
    from convselect.models.shape import ConvArgs
    from convselect.perf_config import PerformanceConfig
    from convselect.solver import ConvSolver

GROUPED_CONV_FWD_LAYER_QUANT: Final[str] = "conv2d.grouped_fwd.layer_quant"
"""Operation family: grouped 2-D forward convolution with per-layer requantization."""

INT8_CLAMP_RANGE: Final[tuple[float, float]] = (-128.0, 127.0)


@dataclass(frozen=True, slots=True)
class ElementwiseOp:
    """Elementwise operation fused into a tensor access.

    Attributes:
        kind: "pass_through" or "activation_mul_clamp".
        scale: Multiplier applied after the activation.
        activation: Activation applied before scaling.
        clamp: Inclusive output range, if clamped.
    """

    kind: str
    scale: float = 1.0
    activation: str = "pass_through"
    clamp: tuple[float, float] | None = None


PASS_THROUGH: Final[ElementwiseOp] = ElementwiseOp(kind="pass_through")


def activation_mul_clamp(
    scale: float = 1.0,
    activation: str = "pass_through",
    clamp: tuple[float, float] = INT8_CLAMP_RANGE,
) -> ElementwiseOp:
    """Requantizing output op: activation, multiply by scale, clamp."""
    return ElementwiseOp(
        kind="activation_mul_clamp",
        scale=scale,
        activation=activation,
        clamp=clamp,
    )


@dataclass(frozen=True, slots=True)
class ElementwiseOps:
    """Elementwise ops applied to input, weight and output."""

    input: ElementwiseOp = PASS_THROUGH
    weight: ElementwiseOp = PASS_THROUGH
    output: ElementwiseOp = field(default_factory=activation_mul_clamp)


DEFAULT_ELEMENTWISE: Final[ElementwiseOps] = ElementwiseOps()


@dataclass(frozen=True, slots=True)
class IOBuffers:
    """Borrowed device buffers for one invocation.

    The buffers are owned by the caller; nothing here retains them past
    the invocation they were passed to.
    """

    input: Any
    weight: Any
    output: Any


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """Fully marshalled request for one candidate kernel.

    Attributes:
        kernel_id: Identity of the candidate that built the request.
        buffers: Device buffers, or None for a support probe.
        args: Native shapes and convolution parameters.
        dtype: Element type.
        elementwise: Fused elementwise ops.
    """

    kernel_id: str
    buffers: IOBuffers | None
    args: "ConvArgs"
    dtype: "torch.dtype"
    elementwise: ElementwiseOps = DEFAULT_ELEMENTWISE


@runtime_checkable
class CandidateHandle(Protocol):
    """One executable kernel implementation from the catalog."""

    @property
    def identity(self) -> str:
        """Stable, comparable token naming this candidate."""
        ...

    def probe(self, args: "ConvArgs", dtype: "torch.dtype") -> bool:
        """Whether this candidate can execute the given arguments."""
        ...

    def build_request(
        self,
        buffers: IOBuffers,
        args: "ConvArgs",
        dtype: "torch.dtype",
        elementwise: ElementwiseOps = DEFAULT_ELEMENTWISE,
    ) -> ExecutionRequest:
        """Marshal an execution request for the given buffers."""
        ...


@runtime_checkable
class CandidateCatalog(Protocol):
    """Source of candidate kernels.

    enumerate() must return candidates in the same order on every call
    for the same (dtype, family) and catalog build.
    """

    def enumerate(
        self,
        dtype: "torch.dtype",
        family: str,
    ) -> Sequence[CandidateHandle]:
        ...


@runtime_checkable
class ExecutionBackend(Protocol):
    """Runs execution requests on the device."""

    def submit(
        self,
        request: ExecutionRequest,
        stream: Any,
        profiling: bool,
    ) -> float:
        """Execute the request and return elapsed milliseconds.

        Raises:
            Exception: Any backend failure; wrapped by the caller.
        """
        ...


@runtime_checkable
class SearchDriver(Protocol):
    """External empirical tuner.

    Walks a solver's performance configs, times each one through
    ConvSolver.invoke() and returns the fastest.
    """

    def search(
        self,
        solver: "ConvSolver",
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
        buffers: IOBuffers,
    ) -> "PerformanceConfig":
        ...


@dataclass(frozen=True, slots=True)
class KernelInstance:
    """CandidateHandle backed by a plain support predicate.

    Attributes:
        kernel_id: Stable identity (e.g. the instance's type-id name).
        supports: Predicate deciding whether (args, dtype) is supported.
    """

    kernel_id: str
    supports: Callable[["ConvArgs", "torch.dtype"], bool] = field(
        default=lambda args, dtype: True, compare=False
    )

    @property
    def identity(self) -> str:
        return self.kernel_id

    def probe(self, args: "ConvArgs", dtype: "torch.dtype") -> bool:
        return bool(self.supports(args, dtype))

    def build_request(
        self,
        buffers: IOBuffers,
        args: "ConvArgs",
        dtype: "torch.dtype",
        elementwise: ElementwiseOps = DEFAULT_ELEMENTWISE,
    ) -> ExecutionRequest:
        return ExecutionRequest(
            kernel_id=self.kernel_id,
            buffers=buffers,
            args=args,
            dtype=dtype,
            elementwise=elementwise,
        )
