"""
convselect Solver

Facade over applicability, performance configs and invocation for the
grouped forward convolution family.

This module provides:
- ConvSolver: is_applicable / default_config / invoke / search lifecycle
- Solution: Invoker bound to one problem and config
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from convselect.applicability import ApplicabilityFilter, ApplicabilityReport
from convselect.catalog import (
    DEFAULT_ELEMENTWISE,
    GROUPED_CONV_FWD_LAYER_QUANT,
    ElementwiseOps,
)
from convselect.config import SolverOptions
from convselect.exceptions import (
    CandidateNotFoundError,
    ConfigInvariantError,
    ConfigurationError,
    KernelExecutionError,
)
from convselect.layout import derive
from convselect.perf_config import PerformanceConfig

if TYPE_CHECKING:
    from convselect.catalog import CandidateCatalog, IOBuffers, SearchDriver
    from convselect.context import ExecutionContext
    from convselect.models.problem import ProblemDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Solution:
    """Ready-to-run solution.

    Attributes:
        solver_id: Solver that produced the solution.
        kernel_id: Candidate the invoker runs.
        invoker: Callable (context, buffers) -> elapsed milliseconds.
    """

    solver_id: str
    kernel_id: str
    invoker: Callable[["ExecutionContext", "IOBuffers"], float]

    def __call__(self, context: "ExecutionContext", buffers: "IOBuffers") -> float:
        return self.invoker(context, buffers)


class ConvSolver:
    """Solver for grouped 2-D forward convolution with per-layer requantization.

    Example:
        solver = ConvSolver(catalog)
        if solver.is_applicable(ctx, problem):
            config = solver.default_config(problem)
            solver.invoke(ctx, problem, config, buffers)
    """

    solver_id = "ConvGroupedFwdLayerQuant"

    __slots__ = ("_applicability", "_elementwise")

    def __init__(
        self,
        catalog: "CandidateCatalog",
        options: SolverOptions | None = None,
        family: str = GROUPED_CONV_FWD_LAYER_QUANT,
        elementwise: ElementwiseOps = DEFAULT_ELEMENTWISE,
    ) -> None:
        """Initialize solver.

        Args:
            catalog: Candidate catalog (read-only, may be shared).
            options: Family switches. Defaults to SolverOptions().
            family: Operation family enumerated from the catalog.
            elementwise: Fused elementwise ops put on every request.
        """
        self._applicability = ApplicabilityFilter(catalog, options, family)
        self._elementwise = elementwise

    @property
    def applicability(self) -> ApplicabilityFilter:
        return self._applicability

    @property
    def options(self) -> SolverOptions:
        return self._applicability.options

    def is_applicable(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
    ) -> bool:
        """Whether some candidate of the family can execute the problem."""
        return self._applicability.is_family_applicable(context, problem)

    def explain(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
    ) -> ApplicabilityReport:
        """Detailed applicability report for debugging."""
        return self._applicability.explain(context, problem)

    def default_config(self, problem: "ProblemDescriptor") -> PerformanceConfig:
        """Config positioned on the first applicable candidate.

        Raises:
            ConfigInvariantError: If the problem should not have been
                deemed applicable.
        """
        config = PerformanceConfig()
        config.heuristic_init(problem, self._applicability)
        return config

    def is_valid_config(
        self,
        problem: "ProblemDescriptor",
        config: PerformanceConfig,
    ) -> bool:
        return config.is_valid(problem, self._applicability)

    def invoke(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
        config: PerformanceConfig,
        buffers: "IOBuffers",
    ) -> float:
        """Run the configured candidate on the given buffers.

        Shapes are re-derived from the problem on every call; nothing
        cached at config construction time is reused.

        Returns:
            Elapsed milliseconds reported by the backend.

        Raises:
            ConfigInvariantError: If config carries no identity.
            CandidateNotFoundError: If the identity is not in the catalog.
            ConfigurationError: If the context has no backend.
            KernelExecutionError: If building the request or the backend fails.
        """
        kernel_id = config.kernel_id
        if kernel_id is None:
            raise ConfigInvariantError(
                "Cannot invoke an uninitialized performance config",
                problem=problem.summary(),
            )

        args = derive(problem)
        candidate = self._applicability.find(problem.dtype, kernel_id)
        if candidate is None:
            raise CandidateNotFoundError(kernel_id, problem=problem.summary())

        backend = context.backend
        if backend is None:
            raise ConfigurationError(
                f"Execution context for '{context.device_name}' has no backend",
                config_key="backend",
                expected="ExecutionBackend",
                got=None,
            )

        try:
            request = candidate.build_request(buffers, args, problem.dtype, self._elementwise)
            elapsed_ms = backend.submit(request, context.stream, context.profiling)
        except Exception as e:
            raise KernelExecutionError(kernel_id, e, problem=problem.summary()) from e

        if context.profiling:
            context.reset_kernel_time()
            context.accum_kernel_time(elapsed_ms)

        logger.debug("Invoked %s in %.4f ms", kernel_id, elapsed_ms)
        return elapsed_ms

    def get_solution(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
        config: PerformanceConfig,
    ) -> Solution:
        """Bind problem and config into a reusable invoker.

        The invoker captures its own copy of the config identity, so later
        advances of config do not change what it runs.

        Raises:
            ConfigInvariantError: If config carries no identity.
        """
        if config.kernel_id is None:
            raise ConfigInvariantError(
                "Cannot build a solution from an uninitialized performance config",
                problem=problem.summary(),
            )

        bound = PerformanceConfig(config.kernel_id)

        def invoker(ctx: "ExecutionContext", buffers: "IOBuffers") -> float:
            return self.invoke(ctx, problem, bound, buffers)

        logger.debug(
            "Built solution %s/%s on %s", self.solver_id, bound.kernel_id, context.target
        )
        return Solution(solver_id=self.solver_id, kernel_id=bound.kernel_id, invoker=invoker)

    def search(
        self,
        context: "ExecutionContext",
        problem: "ProblemDescriptor",
        buffers: "IOBuffers",
        driver: "SearchDriver",
    ) -> PerformanceConfig:
        """Delegate empirical tuning to an external search driver.

        Returns:
            The config the driver selected.
        """
        logger.info("Searching %s for %s", self.solver_id, problem.summary())
        result = driver.search(self, context, problem, buffers)
        logger.info("Search selected %s", result.kernel_id)
        return result
